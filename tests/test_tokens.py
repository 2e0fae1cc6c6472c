from datetime import datetime, timedelta, timezone

import jwt
import pytest

from core.cookies import cookie_attributes
from core.errors import SigningError
from core.tokens import TokenIssuer


def test_issue_embeds_subject_and_expiry():
    issuer = TokenIssuer("l2k3j4lkjlkdsj")
    before = datetime.now(timezone.utc)

    token = issuer.issue("ana@example.com")

    claims = jwt.decode(token, "l2k3j4lkjlkdsj", algorithms=["HS256"])
    assert claims["id"] == "ana@example.com"
    expires = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
    assert before + timedelta(hours=23, minutes=59) < expires <= before + timedelta(hours=24, seconds=1)


@pytest.mark.parametrize("secret,subject", [("", "ana@example.com"), ("secret", ""), (None, "a")])
def test_issue_never_produces_unsigned_tokens(secret, subject):
    with pytest.raises(SigningError):
        TokenIssuer(secret).issue(subject)


def test_introspect_round_trip():
    issuer = TokenIssuer("secret")
    session = issuer.introspect(issuer.issue("ana@example.com"))

    assert session.active
    assert session.subject == "ana@example.com"
    assert session.expires_at > datetime.now(timezone.utc)


def test_introspect_inactive_cases():
    issuer = TokenIssuer("secret")
    unsigned = jwt.encode({"id": "ana@example.com", "exp": 9999999999}, "", algorithm="none")
    no_subject = jwt.encode({"exp": 9999999999}, "secret", algorithm="HS256")

    for token in (None, "", "a.b.c", unsigned, no_subject):
        assert issuer.introspect(token).active is False

    assert TokenIssuer("").introspect(issuer.issue("ana@example.com")).active is False


def test_cookie_attributes_follow_environment():
    assert cookie_attributes("production") == {"httponly": False, "secure": True, "samesite": "none"}
    for env in ("development", "test", "staging"):
        assert cookie_attributes(env) == {"httponly": False, "secure": False, "samesite": "lax"}
