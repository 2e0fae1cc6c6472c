import logging
import threading
from typing import Optional

import google.auth.transport.requests
from google.auth.credentials import Credentials
from google.auth.exceptions import GoogleAuthError

from core.errors import ExternalServiceError, Unauthorized
from schemas.user_schema import Identity, IdentityRef
from services.base import IdentityService
from services.firebase.client import FirebaseClient
from services.result import Result, handler_service

log = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
IDENTITY_TOOLKIT_SCOPE = "https://www.googleapis.com/auth/identitytoolkit"

RESET_PASSWORD_ERRORS = {
    "EMAIL_NOT_FOUND": (404, "No existe una cuenta con ese correo electrónico"),
}


def _identity_from_user(user: dict) -> Identity:
    return Identity(
        uid=user["localId"],
        email=user.get("email", ""),
        display_name=user.get("displayName"),
        photo_url=user.get("photoUrl"),
        email_verified=bool(user.get("emailVerified", False)),
    )


class FirebaseAuthService(IdentityService):
    """Identity Toolkit REST adapter.

    User-facing calls are keyed by the web API key. Looking an account up by
    uid needs an OAuth access token with admin scope, taken from the
    service-account ``admin_credentials`` and refreshed once it expires.
    """

    def __init__(
        self,
        api_key: str,
        project_id: str,
        admin_credentials: Optional[Credentials] = None,
        client: Optional[FirebaseClient] = None,
        base_url: str = IDENTITY_TOOLKIT_URL,
    ):
        self.api_key = api_key
        self.project_id = project_id
        self.admin_credentials = admin_credentials
        self.client = client or FirebaseClient()
        self.base_url = base_url.rstrip("/")
        # credentials are shared across handler threads
        self._credentials_lock = threading.RLock()

    def _call(self, endpoint: str, body: dict, action: str, errors: Optional[dict] = None) -> dict:
        return self.client.request(
            "POST",
            f"{self.base_url}/accounts:{endpoint}",
            action,
            errors=errors,
            params={"key": self.api_key},
            json=body,
        )

    def _admin_token(self) -> str:
        if self.admin_credentials is None:
            raise ExternalServiceError("Verificación de correo no configurada", status_code=503)
        with self._credentials_lock:
            if not self.admin_credentials.valid:
                log.debug("Refreshing Identity Toolkit admin credentials")
                try:
                    self.admin_credentials.refresh(
                        google.auth.transport.requests.Request(session=self.client.session)
                    )
                except GoogleAuthError as e:
                    log.warning("Could not refresh admin credentials: %s", e)
                    raise ExternalServiceError(
                        "No se pudo obtener la credencial de administración", status_code=503,
                    ) from e
            return self.admin_credentials.token

    def _lookup(self, id_token: str) -> Identity:
        data = self._call("lookup", {"idToken": id_token}, "consultar usuario")
        users = data.get("users") or []
        if not users:
            raise ExternalServiceError("Usuario no encontrado", status_code=404)
        return _identity_from_user(users[0])

    # ------------------------------------------------------------------ login
    def verify_credentials(self, email: str, password: str) -> Result[Identity]:
        def run():
            signed = self._call(
                "signInWithPassword",
                {"email": email, "password": password, "returnSecureToken": True},
                "verificar credenciales",
            )
            # signInWithPassword omits emailVerified, lookup has it
            return self._lookup(signed["idToken"])
        return handler_service(run, "verificar credenciales (Firebase Auth)")

    # --------------------------------------------------------------- register
    def register_account(self, username: str, email: str, password: str) -> Result[IdentityRef]:
        def run():
            created = self._call(
                "signUp",
                {"email": email, "password": password, "returnSecureToken": True},
                "crear cuenta",
            )
            updated = self._call(
                "update",
                {"idToken": created["idToken"], "displayName": username, "returnSecureToken": True},
                "actualizar perfil",
            )
            return IdentityRef(
                uid=created["localId"],
                email=created.get("email", email),
                display_name=updated.get("displayName", username),
                id_token=updated.get("idToken") or created["idToken"],
            )
        return handler_service(run, "crear usuario (Firebase Auth)")

    def send_email_verification(self, ref: IdentityRef) -> Result[None]:
        def run():
            self._call(
                "sendOobCode",
                {"requestType": "VERIFY_EMAIL", "idToken": ref.id_token},
                "enviar correo de verificación",
            )
        return handler_service(run, "enviar verificación de correo (Firebase Auth)")

    def validate_email_verification(self, uid: str) -> Result[None]:
        def run():
            token = self._admin_token()
            data = self.client.request(
                "POST",
                f"{self.base_url}/projects/{self.project_id}/accounts:lookup",
                "consultar verificación de correo",
                headers={"Authorization": f"Bearer {token}"},
                json={"localId": [uid]},
            )
            users = data.get("users") or []
            if not users:
                raise ExternalServiceError("Usuario no encontrado", status_code=404)
            if not users[0].get("emailVerified"):
                raise Unauthorized("Email no verificado")
        return handler_service(run, "validar verificación de correo (Firebase Auth)")

    # --------------------------------------------------------- reset password
    def send_email_reset_password(self, email: str) -> Result[None]:
        def run():
            self._call(
                "sendOobCode",
                {"requestType": "PASSWORD_RESET", "email": email},
                "enviar correo de restablecimiento",
                errors=RESET_PASSWORD_ERRORS,
            )
        return handler_service(run, "enviar restablecimiento de contraseña (Firebase Auth)")

    def validate_reset_password(self, oob_code: str, password: str) -> Result[None]:
        def run():
            self._call(
                "resetPassword",
                {"oobCode": oob_code, "newPassword": password},
                "restablecer contraseña",
            )
        return handler_service(run, "validar restablecimiento de contraseña (Firebase Auth)")
