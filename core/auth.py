from typing import Optional

from fastapi import Cookie, Depends, Header

from core.cookies import SESSION_COOKIE
from core.errors import Unauthorized
from core.services import get_token_issuer
from core.tokens import TokenIntrospection, TokenIssuer


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def get_current_session(
    token: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    authorization: Optional[str] = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenIntrospection:
    """Resolve the caller's session from a bearer header or the ``token`` cookie.

    Both sources are tried, bearer first, and the first active one wins.
    """
    candidates = [raw for raw in (_extract_bearer_token(authorization), token) if raw]
    if not candidates:
        raise Unauthorized("No autenticado")

    for raw in candidates:
        session = issuer.introspect(raw)
        if session.active:
            return session
    raise Unauthorized("Token inválido o expirado")
