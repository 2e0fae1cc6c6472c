from datetime import timedelta

from fastapi import FastAPI, Request
from google.oauth2 import service_account

from core.config import Settings
from core.tokens import TokenIssuer
from services.base import DatabaseService, IdentityService, StorageService
from services.firebase.auth_service import IDENTITY_TOOLKIT_SCOPE, FirebaseAuthService
from services.firebase.client import FirebaseClient
from services.firebase.database_service import FirestoreDatabaseService
from services.firebase.storage_service import FirebaseStorageService


def load_admin_credentials(path):
    """Service-account credentials for admin lookups, or None when unconfigured."""
    if not path:
        return None
    return service_account.Credentials.from_service_account_file(path, scopes=[IDENTITY_TOOLKIT_SCOPE])


def init_services(app: FastAPI, settings: Settings) -> None:
    """Build the external-service clients once and park them on app.state."""
    client = FirebaseClient(timeout=settings.HTTP_TIMEOUT)
    app.state.identity_service = FirebaseAuthService(
        api_key=settings.FIREBASE_API_KEY,
        project_id=settings.FIREBASE_PROJECT_ID,
        admin_credentials=load_admin_credentials(settings.FIREBASE_CREDENTIALS_FILE),
        client=client,
    )
    app.state.storage_service = FirebaseStorageService(settings.FIREBASE_STORAGE_BUCKET, client=client)
    app.state.database_service = FirestoreDatabaseService(
        settings.FIREBASE_PROJECT_ID, root=settings.FIRESTORE_ROOT, client=client,
    )
    app.state.token_issuer = TokenIssuer(
        settings.JWT_SECRET, ttl=timedelta(hours=settings.SESSION_TTL_HOURS),
    )


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


def get_storage_service(request: Request) -> StorageService:
    return request.app.state.storage_service


def get_database_service(request: Request) -> DatabaseService:
    return request.app.state.database_service


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer
