import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Cookie, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from core.config import settings
from core.cookies import SESSION_COOKIE
from core.errors import ValidationError, describe_errors, operation
from core.services import get_identity_service, get_token_issuer
from core.tokens import TokenIssuer
from schemas.api_schema import ApiResponse, send
from schemas.auth_schema import (
    ForgotPasswordRequest,
    ResetPasswordRequest,
    VerifyAuthRequest,
    VerifyEmailRequest,
    VerifyResetRequest,
)
from services.base import IdentityService

log = logging.getLogger(__name__)

router = APIRouter(prefix=settings.API_PREFIX, tags=["Verification"])

VERIFY_EMAIL = "verifyEmail"


@router.post("/verify-auth", response_model=ApiResponse)
def verify_auth(
    body: Optional[VerifyAuthRequest] = None,
    token: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Report whether a session token (body first, then cookie) is still valid."""
    with operation("verificar autenticación"):
        raw = (body.token if body else None) or token
        session = issuer.introspect(raw)
        if not session.active:
            return JSONResponse(status_code=400, content={"status": 400, "data": {"active": False}})
        return send(session)


@router.post("/verify-action/{mode}", response_model=ApiResponse)
def verify_action(
    mode: str,
    body: Optional[Dict[str, Any]] = Body(None),
    identity: IdentityService = Depends(get_identity_service),
):
    """
    Confirm an out-of-band action.

    ``verifyEmail`` expects ``{uid, email, username, role}``; any other
    mode is a password reset and expects ``{oobCode, password}``.
    """
    with operation("verificar acción"):
        try:
            if mode == VERIFY_EMAIL:
                request = VerifyEmailRequest.model_validate(body or {})
                result = identity.validate_email_verification(request.uid)
            else:
                request = VerifyResetRequest.model_validate(body or {})
                result = identity.validate_reset_password(request.oobCode, request.password)
        except PydanticValidationError as e:
            raise ValidationError(details={"errors": describe_errors(e.errors())}) from e

        result.unwrap()
        log.info("Verification action %s completed", mode)
        return send("acción completada")


@router.post("/forgot-password", response_model=ApiResponse)
def forgot_password(body: ForgotPasswordRequest, identity: IdentityService = Depends(get_identity_service)):
    """Send a reset email. The identity service expires the code after an hour."""
    with operation("envio de correo de restablecimiento de contraseña"):
        identity.send_email_reset_password(body.email).unwrap()
        return send("correo de restablecimiento enviado")


@router.post("/reset-password/{oobCode}", response_model=ApiResponse)
def reset_password(
    oobCode: str,
    body: ResetPasswordRequest,
    identity: IdentityService = Depends(get_identity_service),
):
    with operation("validar restablecimiento de contraseña"):
        identity.validate_reset_password(oobCode, body.password).unwrap()
        return send("Contraseña restablecida correctamente")
