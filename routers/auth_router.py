import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from pydantic import ValidationError as PydanticValidationError

from core.auth import get_current_session
from core.config import settings
from core.cookies import SESSION_COOKIE, expire_session_cookie, set_session_cookie
from core.errors import Unauthorized, ValidationError, describe_errors, operation
from core.services import get_database_service, get_identity_service, get_storage_service, get_token_issuer
from core.tokens import TokenIntrospection, TokenIssuer
from schemas.api_schema import ApiResponse, send
from schemas.auth_schema import CredentialRecord, LoginRequest, RegisterRequest
from schemas.user_schema import UserProfile
from services.base import DatabaseService, IdentityService, StorageService
from services.media import compress_image

log = logging.getLogger(__name__)

router = APIRouter(prefix=settings.API_PREFIX, tags=["Authentication"])


@router.post("/login", response_model=ApiResponse)
def login(
    body: LoginRequest,
    response: Response,
    identity: IdentityService = Depends(get_identity_service),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Verify credentials with the identity service and open a cookie session.
    Only accounts with a confirmed email get a token.
    """
    with operation("inicio de sesión"):
        user = identity.verify_credentials(body.email, body.password).unwrap()
        if not user.email_verified:
            raise Unauthorized("Email no verificado")

        token = issuer.issue(user.email)
        set_session_cookie(response, token)
        log.info("Session opened for %s", user.uid)
        return send(UserProfile.model_validate(user))


def _parse_register_form(**fields) -> RegisterRequest:
    raw_networks = fields.pop("socialNetworks") or "[]"
    try:
        networks = json.loads(raw_networks)
    except ValueError as e:
        raise ValidationError(details={"errors": [
            {"field": "socialNetworks", "message": "Debe ser un arreglo JSON"},
        ]}) from e
    try:
        return RegisterRequest(socialNetworks=networks, **fields)
    except PydanticValidationError as e:
        raise ValidationError(details={"errors": describe_errors(e.errors())}) from e


@router.post("/register", response_model=ApiResponse)
def register(
    email: str = Form(...),
    password: str = Form(...),
    username: str = Form(...),
    phone: str = Form(...),
    description: str = Form(...),
    socialNetworks: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    identity: IdentityService = Depends(get_identity_service),
    storage: StorageService = Depends(get_storage_service),
    database: DatabaseService = Depends(get_database_service),
):
    """
    Create the account, send the verification email, upload the profile
    photo and store the profile record, in that order.
    Steps are not rolled back when a later one fails.
    """
    completed: list[str] = []
    with operation("registro de usuario"):
        data = _parse_register_form(
            email=email, password=password, username=username,
            phone=phone, description=description, socialNetworks=socialNetworks,
        )
        try:
            ref = identity.register_account(data.username, data.email, data.password).unwrap()
            completed.append("account")

            identity.send_email_verification(ref).unwrap()
            completed.append("verification_email")

            photo_url = None
            if photo is not None:
                blob = photo.file.read()
                mime = photo.content_type or "application/octet-stream"
                photo_url = storage.upload_file(
                    f"{data.email}/preview", compress_image(blob, mime), mime, auth_token=ref.id_token,
                ).unwrap()
                completed.append("photo")

            credentials = CredentialRecord(
                phone=data.phone,
                description=data.description,
                socialNetworks=data.socialNetworks,
                photo=photo_url,
            )
            database.register_user_credentials(ref, credentials).unwrap()
        except Exception:
            if completed:
                log.warning("Registration for %s stopped after %s", data.email, ", ".join(completed))
            raise

        log.info("Registered account %s", ref.uid)
        return send("Usuario registrado exitosamente, se ha enviado un correo de verificación")


@router.post("/logout", response_model=ApiResponse)
def logout(request: Request, response: Response):
    with operation("cierre de sesión"):
        if request.cookies.get(SESSION_COOKIE):
            expire_session_cookie(response)
        return send("Sesión cerrada exitosamente")


@router.get("/me", response_model=ApiResponse)
def get_me(session: TokenIntrospection = Depends(get_current_session)):
    return send(session)
