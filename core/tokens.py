"""Signed session tokens.

Tokens are HS256 JWTs carrying the subject under ``id`` (the shape the
downstream authorization middleware reads) plus ``iat`` and ``exp``.
Nothing is stored server-side: a token dies when the client drops it or
when it expires.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel

from core.errors import SigningError

log = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_TTL = timedelta(hours=24)


class TokenIntrospection(BaseModel):
    active: bool
    subject: Optional[str] = None
    expires_at: Optional[datetime] = None


class TokenIssuer:
    def __init__(self, secret: str, ttl: timedelta = SESSION_TTL):
        self._secret = secret
        self.ttl = ttl

    def issue(self, subject: str) -> str:
        """Sign a token for ``subject`` valid for ``self.ttl``.

        Raises SigningError instead of ever returning an unsigned token.
        """
        if not self._secret:
            raise SigningError("Clave de firma no configurada")
        if not subject:
            raise SigningError("El identificador del usuario es requerido")

        now = datetime.now(timezone.utc)
        payload = {"id": subject, "iat": now, "exp": now + self.ttl}
        try:
            return jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            log.error("Failed to sign session token: %s", e)
            raise SigningError() from e

    def introspect(self, token: Optional[str]) -> TokenIntrospection:
        """Check signature and expiry. Bad tokens are inactive, never errors."""
        if not token or not self._secret:
            return TokenIntrospection(active=False)
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "id"]},
            )
        except jwt.ExpiredSignatureError:
            log.debug("Session token expired")
            return TokenIntrospection(active=False)
        except jwt.InvalidTokenError as e:
            log.debug("Session token rejected: %s", e)
            return TokenIntrospection(active=False)

        subject = claims.get("id")
        if not isinstance(subject, str) or not subject:
            return TokenIntrospection(active=False)
        return TokenIntrospection(
            active=True,
            subject=subject,
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
