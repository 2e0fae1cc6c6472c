from pydantic import BaseModel, EmailStr, Field, HttpUrl


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class SocialNetwork(BaseModel):
    type: str
    url: HttpUrl


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    username: str = Field(min_length=3)
    phone: str = Field(min_length=10)
    description: str = Field(min_length=10)
    socialNetworks: list[SocialNetwork] = Field(default_factory=list)


class CredentialRecord(BaseModel):
    phone: str
    description: str
    socialNetworks: list[SocialNetwork] = Field(default_factory=list)
    photo: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str = Field(min_length=6)


class VerifyEmailRequest(BaseModel):
    uid: str
    email: str | None = None
    username: str | None = None
    role: str | None = None


class VerifyResetRequest(BaseModel):
    oobCode: str
    password: str = Field(min_length=6)


class VerifyAuthRequest(BaseModel):
    token: str | None = None
