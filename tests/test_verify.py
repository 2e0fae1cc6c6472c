from datetime import timedelta

from core.config import settings
from core.tokens import TokenIssuer

PREFIX = settings.API_PREFIX


def test_verify_email_mode_ignores_reset_fields(client, identity):
    identity.add("ana@example.com", "secret123", verified=True, uid="uid-ana")

    res = client.post(
        f"{PREFIX}/verify-action/verifyEmail",
        json={"uid": "uid-ana", "email": "ana@example.com", "username": "ana", "role": "client",
              "oobCode": "good-code", "password": "newsecret"},
    )

    assert res.status_code == 200
    assert res.json()["data"] == "acción completada"
    assert identity.calls == [("validate_email_verification", "uid-ana")]


def test_verify_email_mode_fails_for_unverified_account(client, identity):
    identity.add("bob@example.com", "secret123", verified=False, uid="uid-bob")

    res = client.post(f"{PREFIX}/verify-action/verifyEmail", json={"uid": "uid-bob"})

    assert res.status_code == 401
    assert res.json()["details"]["context"] == "verificar acción"


def test_any_other_mode_resets_password(client, identity):
    for mode in ("resetPassword", "whatever"):
        identity.calls.clear()
        res = client.post(
            f"{PREFIX}/verify-action/{mode}",
            json={"oobCode": "good-code", "password": "newsecret"},
        )
        assert res.status_code == 200
        assert identity.calls == [("validate_reset_password", "good-code", "newsecret")]


def test_reset_mode_requires_code_and_password(client, identity):
    res = client.post(f"{PREFIX}/verify-action/resetPassword", json={"password": "newsecret"})

    assert res.status_code == 400
    assert res.json()["details"]["errors"][0]["field"] == "oobCode"
    assert identity.calls == []


def test_reset_mode_surfaces_bad_code(client):
    res = client.post(
        f"{PREFIX}/verify-action/resetPassword",
        json={"oobCode": "stale", "password": "newsecret"},
    )

    assert res.status_code == 400
    assert res.json()["message"] == "El código de verificación es inválido"


def test_forgot_password_sends_reset_email(client, identity):
    identity.add("ana@example.com", "secret123")

    res = client.post(f"{PREFIX}/forgot-password", json={"email": "ana@example.com"})

    assert res.status_code == 200
    assert res.json() == {"status": 200, "data": "correo de restablecimiento enviado"}


def test_forgot_password_unknown_email_is_labelled(client):
    res = client.post(f"{PREFIX}/forgot-password", json={"email": "nobody@example.com"})

    assert 400 <= res.status_code < 500
    details = res.json()["details"]
    assert details["context"] == "envio de correo de restablecimiento de contraseña"


def test_reset_password_uses_path_code(client, identity):
    res = client.post(f"{PREFIX}/reset-password/good-code", json={"password": "newsecret"})

    assert res.status_code == 200
    assert res.json()["data"] == "Contraseña restablecida correctamente"
    assert identity.calls == [("validate_reset_password", "good-code", "newsecret")]


def test_reset_password_bad_code(client):
    res = client.post(f"{PREFIX}/reset-password/expired", json={"password": "newsecret"})

    assert res.status_code == 400
    assert res.json()["details"]["context"] == "validar restablecimiento de contraseña"


def test_verify_auth_accepts_body_or_cookie(client, issuer):
    token = issuer.issue("ana@example.com")

    res = client.post(f"{PREFIX}/verify-auth", json={"token": token})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["active"] is True
    assert data["subject"] == "ana@example.com"

    client.cookies.set("token", token)
    res = client.post(f"{PREFIX}/verify-auth")
    assert res.status_code == 200


def test_verify_auth_rejects_foreign_and_expired_tokens(client):
    foreign = TokenIssuer("another_secret").issue("ana@example.com")
    expired = TokenIssuer("testing_secret", ttl=timedelta(seconds=-5)).issue("ana@example.com")

    for token in (foreign, expired, "garbage"):
        res = client.post(f"{PREFIX}/verify-auth", json={"token": token})
        assert res.status_code == 400
        assert res.json() == {"status": 400, "data": {"active": False}}

    res = client.post(f"{PREFIX}/verify-auth")
    assert res.status_code == 400
