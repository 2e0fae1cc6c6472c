import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from core.app_logging import setup_logger
from core.config import settings
from core.errors import ErrorAPI, error_api_handler, request_validation_handler
from core.services import init_services
from routers import auth_router, verify_router

setup_logger(settings.LOG_LEVEL, json=settings.LOG_JSON)
log = logging.getLogger(__name__)

app = FastAPI(title="Technopark Auth API")

# Respect X-Forwarded-Proto/Host when behind a proxy (Docker/nginx/etc.)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

# The session cookie travels cross-site, so the frontend origin must be explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ErrorAPI, error_api_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

init_services(app, settings)

app.include_router(auth_router.router)
app.include_router(verify_router.router)

if not settings.JWT_SECRET:
    log.warning("JWT_SECRET is not set; logins will fail with a signing error")
log.info("Auth API ready (environment=%s, prefix=%s)", settings.ENVIRONMENT, settings.API_PREFIX)


@app.get("/")
def root():
    return {"message": "Auth API Ready"}
