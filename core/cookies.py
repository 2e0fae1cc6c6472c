from typing import Optional

from fastapi import Response

from core.config import settings

SESSION_COOKIE = "token"
SESSION_MAX_AGE = 24 * 60 * 60  # seconds


def cookie_attributes(environment: Optional[str] = None) -> dict:
    """Transport flags for the session cookie in the given environment."""
    env = environment if environment is not None else settings.ENVIRONMENT
    production = env == "production"
    return {
        "httponly": False,  # the frontend reads the token from script
        "secure": production,
        "samesite": "none" if production else "lax",
    }


def set_session_cookie(
    response: Response,
    token: str,
    max_age: int = SESSION_MAX_AGE,
    environment: Optional[str] = None,
) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=max_age,
        path="/",
        **cookie_attributes(environment),
    )


def expire_session_cookie(response: Response, environment: Optional[str] = None) -> None:
    set_session_cookie(response, "", max_age=0, environment=environment)
