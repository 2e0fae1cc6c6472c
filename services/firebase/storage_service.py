import logging
from typing import Optional
from urllib.parse import quote

from core.errors import ExternalServiceError
from services.base import StorageService
from services.firebase.client import FirebaseClient
from services.result import Result, handler_service

log = logging.getLogger(__name__)

STORAGE_URL = "https://firebasestorage.googleapis.com/v0"


class FirebaseStorageService(StorageService):

    def __init__(self, bucket: str, client: Optional[FirebaseClient] = None, base_url: str = STORAGE_URL):
        self.bucket = bucket
        self.client = client or FirebaseClient()
        self.base_url = base_url.rstrip("/")

    def download_url(self, name: str, download_token: str) -> str:
        return (
            f"{self.base_url}/b/{self.bucket}/o/{quote(name, safe='')}"
            f"?alt=media&token={download_token}"
        )

    def upload_file(
        self,
        key: str,
        blob: bytes,
        content_type: str = "application/octet-stream",
        auth_token: Optional[str] = None,
    ) -> Result[str]:
        def run():
            headers = {"Content-Type": content_type}
            if auth_token:
                headers["Authorization"] = f"Firebase {auth_token}"
            meta = self.client.request(
                "POST",
                f"{self.base_url}/b/{self.bucket}/o",
                "subir archivo",
                params={"uploadType": "media", "name": key},
                data=blob,
                headers=headers,
            )
            tokens = meta.get("downloadTokens")
            if not tokens:
                raise ExternalServiceError("El almacenamiento no devolvió un enlace de descarga", status_code=502)
            url = self.download_url(meta.get("name", key), tokens.split(",")[0])
            log.info("Uploaded %s (%d bytes)", key, len(blob))
            return url
        return handler_service(run, "subir archivo (Firebase Storage)")
