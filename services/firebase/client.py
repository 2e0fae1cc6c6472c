"""Shared HTTP plumbing for the Firebase REST adapters.

Every call goes through ``FirebaseClient.request`` so that timeouts,
connection failures and service rejections surface as distinct
``ExternalServiceError`` statuses (504, 503 and the mapped 4xx).
"""
import logging
import threading
from typing import Any, Callable, Dict, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from core.errors import ExternalServiceError

log = logging.getLogger(__name__)

# Identity Toolkit error codes -> (status, user-facing message)
ERROR_MESSAGES: Dict[str, tuple[int, str]] = {
    "INVALID_LOGIN_CREDENTIALS": (401, "Credenciales inválidas"),
    "EMAIL_NOT_FOUND": (401, "Credenciales inválidas"),
    "INVALID_PASSWORD": (401, "Credenciales inválidas"),
    "INVALID_EMAIL": (400, "Correo electrónico inválido"),
    "MISSING_PASSWORD": (400, "La contraseña es requerida"),
    "USER_DISABLED": (403, "La cuenta ha sido deshabilitada"),
    "EMAIL_EXISTS": (409, "El correo electrónico ya está registrado"),
    "OPERATION_NOT_ALLOWED": (403, "Operación no permitida"),
    "TOO_MANY_ATTEMPTS_TRY_LATER": (429, "Demasiados intentos, intente más tarde"),
    "EXPIRED_OOB_CODE": (400, "El código de verificación ha expirado"),
    "INVALID_OOB_CODE": (400, "El código de verificación es inválido"),
    "WEAK_PASSWORD": (400, "La contraseña es demasiado débil"),
    "INVALID_ID_TOKEN": (401, "La sesión del usuario ya no es válida"),
    "USER_NOT_FOUND": (404, "Usuario no encontrado"),
    "PERMISSION_DENIED": (403, "Permiso denegado"),
    "UNAUTHENTICATED": (401, "No autenticado"),
}


def map_service_error(
    status_code: int,
    payload: Any,
    fallback: str,
    errors: Optional[Dict[str, tuple[int, str]]] = None,
) -> ExternalServiceError:
    """Turn an error response body into an ExternalServiceError.

    Identity Toolkit answers ``{"error": {"message": "CODE : detail"}}``,
    Firestore and Storage answer ``{"error": {"status": "CODE", "message": ...}}``.
    ``errors`` overrides entries of ERROR_MESSAGES for a single call.
    """
    messages = {**ERROR_MESSAGES, **(errors or {})}
    error = payload.get("error") if isinstance(payload, dict) else None
    raw = ""
    code = ""
    if isinstance(error, dict):
        raw = str(error.get("message") or "")
        code = str(error.get("status") or "")
        # "WEAK_PASSWORD : Password should be at least 6 characters"
        head = raw.split(":", 1)[0].strip()
        if head in messages:
            code = head
    elif isinstance(error, str):
        raw = code = error

    if code in messages:
        status, message = messages[code]
        return ExternalServiceError(message, status_code=status, details={"code": code})

    status = status_code if 400 <= status_code < 500 else 502
    return ExternalServiceError(raw or fallback, status_code=status, details={"code": code} if code else None)


class FirebaseClient:
    """Thin ``requests.Session`` wrapper with an explicit timeout.

    Handlers run in a threadpool and ``requests.Session`` is not thread safe,
    so each thread gets its own session from ``session_factory``.
    """

    def __init__(self, timeout: float = 10.0, session_factory: Optional[Callable[[], requests.Session]] = None):
        self.timeout = timeout
        self.session_factory = session_factory or requests.Session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = self.session_factory()
            session.headers.update({"Accept": "application/json"})
            self._local.session = session
        return session

    def request(
        self,
        method: str,
        url: str,
        action: str,
        errors: Optional[Dict[str, tuple[int, str]]] = None,
        **kwargs,
    ) -> Dict[str, Any]:
        """Send a request and return the decoded JSON body.

        ``action`` is a short description used in error messages and logs.
        ``errors`` replaces the default message for specific error codes.
        """
        kwargs.setdefault("timeout", self.timeout)
        log.debug("Firebase %s %s (%s)", method, url.split("?", 1)[0], action)
        try:
            response = self.session.request(method, url, **kwargs)
        except Timeout as e:
            log.warning("Firebase timeout during %s: %s", action, e)
            raise ExternalServiceError(
                f"Tiempo de espera agotado al {action}", status_code=504, details={"code": "TIMEOUT"},
            ) from e
        except ConnectionError as e:
            log.warning("Firebase unreachable during %s: %s", action, e)
            raise ExternalServiceError(
                f"Servicio no disponible al {action}", status_code=503, details={"code": "UNAVAILABLE"},
            ) from e
        except RequestException as e:
            log.warning("Firebase request failed during %s: %s", action, e)
            raise ExternalServiceError(f"Error de comunicación al {action}", status_code=502) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code >= 400:
            raise map_service_error(response.status_code, payload, f"Error al {action}", errors)
        return payload
