from pydantic import BaseModel


class Identity(BaseModel):
    uid: str
    email: str
    display_name: str | None = None
    photo_url: str | None = None
    email_verified: bool = False


class IdentityRef(BaseModel):
    uid: str
    email: str
    display_name: str | None = None
    id_token: str


class UserProfile(BaseModel):
    """Public part of an identity, returned on login."""
    uid: str
    email: str
    display_name: str | None = None
    photo_url: str | None = None
    email_verified: bool

    model_config = {
        "from_attributes": True,
    }
