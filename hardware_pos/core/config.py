from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    APP_NAME: str = "Hardware Store POS"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    MONGODB_URL: str
    DATABASE_NAME: str

    # Security (tokens are issued by the identity provider)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Sales
    STORE_TIMEZONE: str = "UTC"      # Calendar day used for invoice numbering
    INVOICE_PREFIX: str = "INV"
    INVOICE_RETRY_ATTEMPTS: int = 3
    RECONCILE_PENDING_AFTER_SECONDS: int = 300

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()
