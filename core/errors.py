import logging
from contextlib import contextmanager
from typing import Any, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = logging.getLogger(__name__)


class ErrorAPI(Exception):
    """Error surfaced to the client as ``{status, message, details}``."""

    status_code = 400
    default_message = "Error en la solicitud"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = dict(details or {})
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"status": self.status_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ErrorAPI):
    status_code = 400
    default_message = "Datos de entrada inválidos"


class Unauthorized(ErrorAPI):
    status_code = 401
    default_message = "No autorizado"


class ExternalServiceError(ErrorAPI):
    status_code = 400
    default_message = "Error en el servicio externo"


class SigningError(ErrorAPI):
    status_code = 500
    default_message = "No fue posible firmar el token de sesión"


def normalize_error(error: Exception, context: str) -> ErrorAPI:
    """Tag ``error`` with the operation label, wrapping unknown exceptions."""
    if isinstance(error, ErrorAPI):
        error.details["context"] = context
        return error
    log.exception("Unexpected error during %s", context)
    return ErrorAPI("Error interno del servidor", status_code=500, details={"context": context})


@contextmanager
def operation(context: str):
    """Run a route body and normalize whatever it raises."""
    try:
        yield
    except Exception as e:
        normalized = normalize_error(e, context)
        if normalized is e:
            raise
        raise normalized from e


async def error_api_handler(request: Request, exc: ErrorAPI):
    if exc.status_code >= 500:
        log.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    else:
        log.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=ValidationError.status_code,
        content=ValidationError(details={"errors": describe_errors(exc.errors())}).to_dict(),
    )


def describe_errors(errors) -> list[dict[str, str]]:
    """Flatten pydantic errors to ``[{field, message}]``."""
    described = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        described.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return described
