from typing import Any, Optional

from schemas.auth_schema import CredentialRecord
from schemas.user_schema import IdentityRef
from services.base import DatabaseService
from services.firebase.client import FirebaseClient
from services.result import Result, handler_service

FIRESTORE_URL = "https://firestore.googleapis.com/v1"


def encode_value(value: Any) -> dict:
    """Encode a plain Python value as a Firestore REST ``Value``."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    return {"stringValue": str(value)}


def encode_fields(data: dict) -> dict:
    return {k: encode_value(v) for k, v in data.items()}


class FirestoreDatabaseService(DatabaseService):

    def __init__(
        self,
        project_id: str,
        root: str = "technopark/auth",
        client: Optional[FirebaseClient] = None,
        base_url: str = FIRESTORE_URL,
    ):
        self.project_id = project_id
        self.root = root.strip("/")
        self.client = client or FirebaseClient()
        self.base_url = base_url.rstrip("/")

    def document_url(self, collection: str, doc_id: str) -> str:
        return (
            f"{self.base_url}/projects/{self.project_id}/databases/(default)/documents/"
            f"{self.root}/{collection}/{doc_id}"
        )

    def register_user_credentials(self, ref: IdentityRef, credentials: CredentialRecord) -> Result[None]:
        def run():
            doc = credentials.model_dump(mode="json")
            doc["email"] = ref.email
            doc["username"] = ref.display_name
            self.client.request(
                "PATCH",
                self.document_url("users", ref.uid),
                "registrar credenciales",
                headers={"Authorization": f"Bearer {ref.id_token}"},
                json={"fields": encode_fields(doc)},
            )
        return handler_service(run, "crear usuario (Firebase Database)")
