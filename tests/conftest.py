"""Shared fixtures.

The environment is filled in before ``main`` is imported because the
settings object is built at import time.
"""
import os

os.environ.setdefault("JWT_SECRET", "testing_secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("FIREBASE_API_KEY", "test-api-key")
os.environ.setdefault("FIREBASE_PROJECT_ID", "test-project")
os.environ.setdefault("FIREBASE_STORAGE_BUCKET", "test-project.appspot.com")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient

from core.errors import ExternalServiceError, Unauthorized
from core.services import (
    get_database_service,
    get_identity_service,
    get_storage_service,
    get_token_issuer,
)
from core.tokens import TokenIssuer
from main import app
from schemas.user_schema import Identity, IdentityRef
from services.base import DatabaseService, IdentityService, StorageService
from services.result import Result

SECRET = "testing_secret"


class FakeIdentityService(IdentityService):
    """In-memory identity service recording every call."""

    def __init__(self):
        self.accounts = {}
        self.calls = []
        self.fail = {}

    def add(self, email, password, verified=True, uid=None, name="Test User"):
        self.accounts[email] = {
            "password": password,
            "identity": Identity(
                uid=uid or f"uid-{len(self.accounts) + 1}",
                email=email,
                display_name=name,
                photo_url=None,
                email_verified=verified,
            ),
        }

    def _failing(self, op):
        err = self.fail.get(op)
        return Result.fail(err) if err is not None else None

    def verify_credentials(self, email, password):
        self.calls.append(("verify_credentials", email))
        failed = self._failing("verify_credentials")
        if failed:
            return failed
        account = self.accounts.get(email)
        if not account or account["password"] != password:
            return Result.fail(ExternalServiceError("Credenciales inválidas", status_code=401))
        return Result.ok(account["identity"])

    def register_account(self, username, email, password):
        self.calls.append(("register_account", email))
        failed = self._failing("register_account")
        if failed:
            return failed
        self.add(email, password, verified=False, name=username)
        identity = self.accounts[email]["identity"]
        return Result.ok(IdentityRef(uid=identity.uid, email=email, display_name=username, id_token="id-token"))

    def send_email_verification(self, ref):
        self.calls.append(("send_email_verification", ref.email))
        return self._failing("send_email_verification") or Result.ok()

    def validate_email_verification(self, uid):
        self.calls.append(("validate_email_verification", uid))
        failed = self._failing("validate_email_verification")
        if failed:
            return failed
        for account in self.accounts.values():
            if account["identity"].uid == uid:
                if not account["identity"].email_verified:
                    return Result.fail(Unauthorized("Email no verificado"))
                return Result.ok()
        return Result.fail(ExternalServiceError("Usuario no encontrado", status_code=404))

    def send_email_reset_password(self, email):
        self.calls.append(("send_email_reset_password", email))
        failed = self._failing("send_email_reset_password")
        if failed:
            return failed
        if email not in self.accounts:
            return Result.fail(ExternalServiceError("Usuario no encontrado", status_code=404))
        return Result.ok()

    def validate_reset_password(self, oob_code, password):
        self.calls.append(("validate_reset_password", oob_code, password))
        failed = self._failing("validate_reset_password")
        if failed:
            return failed
        if oob_code != "good-code":
            return Result.fail(ExternalServiceError("El código de verificación es inválido", status_code=400))
        return Result.ok()


class FakeStorageService(StorageService):

    def __init__(self):
        self.files = {}
        self.error = None

    def upload_file(self, key, blob, content_type="application/octet-stream", auth_token=None):
        if self.error is not None:
            return Result.fail(self.error)
        self.files[key] = (blob, content_type, auth_token)
        return Result.ok(f"https://storage.test/{key}")


class FakeDatabaseService(DatabaseService):

    def __init__(self):
        self.documents = {}
        self.error = None

    def register_user_credentials(self, ref, credentials):
        if self.error is not None:
            return Result.fail(self.error)
        self.documents[ref.uid] = credentials
        return Result.ok()


@pytest.fixture
def identity():
    return FakeIdentityService()


@pytest.fixture
def storage():
    return FakeStorageService()


@pytest.fixture
def database():
    return FakeDatabaseService()


@pytest.fixture
def issuer():
    return TokenIssuer(SECRET)


@pytest.fixture
def client(identity, storage, database, issuer):
    app.dependency_overrides[get_identity_service] = lambda: identity
    app.dependency_overrides[get_storage_service] = lambda: storage
    app.dependency_overrides[get_database_service] = lambda: database
    app.dependency_overrides[get_token_issuer] = lambda: issuer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
