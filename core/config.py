from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    JWT_SECRET: str = ""
    ENVIRONMENT: str = "development"
    SESSION_TTL_HOURS: int = 24

    FIREBASE_API_KEY: str
    FIREBASE_PROJECT_ID: str
    FIREBASE_STORAGE_BUCKET: str
    FIREBASE_CREDENTIALS_FILE: str | None = None
    FIRESTORE_ROOT: str = "technopark/auth"

    FRONTEND_URL: str = "http://localhost:5173"
    API_PREFIX: str = "/api/auth"
    HTTP_TIMEOUT: float = 10.0

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    class Config:
        env_file = ".env"

settings = Settings()
