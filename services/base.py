"""Contracts of the external collaborators.

Routers only ever talk to these abstract classes. The Firebase REST
adapters in ``services.firebase`` implement them; tests swap in fakes.
"""
from abc import ABC, abstractmethod
from typing import Optional

from schemas.auth_schema import CredentialRecord
from schemas.user_schema import Identity, IdentityRef
from services.result import Result


class IdentityService(ABC):

    @abstractmethod
    def verify_credentials(self, email: str, password: str) -> Result[Identity]:
        """Check an email/password pair and return the identity with its verification state."""

    @abstractmethod
    def register_account(self, username: str, email: str, password: str) -> Result[IdentityRef]:
        ...

    @abstractmethod
    def send_email_verification(self, ref: IdentityRef) -> Result[None]:
        ...

    @abstractmethod
    def validate_email_verification(self, uid: str) -> Result[None]:
        """Succeed only when the account ``uid`` has confirmed its email."""

    @abstractmethod
    def send_email_reset_password(self, email: str) -> Result[None]:
        ...

    @abstractmethod
    def validate_reset_password(self, oob_code: str, password: str) -> Result[None]:
        ...


class StorageService(ABC):

    @abstractmethod
    def upload_file(
        self,
        key: str,
        blob: bytes,
        content_type: str = "application/octet-stream",
        auth_token: Optional[str] = None,
    ) -> Result[str]:
        """Store ``blob`` under ``key`` and return its download URL."""


class DatabaseService(ABC):

    @abstractmethod
    def register_user_credentials(self, ref: IdentityRef, credentials: CredentialRecord) -> Result[None]:
        ...
