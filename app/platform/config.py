from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "Caravan API"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # ── Database ────────────────────────────────
    DATABASE_URL: str

    # ── Email Configuration ─────────────────────
    MAIL_HOST: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_USERNAME: str = "your-email-id"
    MAIL_PASSWORD: str = "your-password"
    MAIL_ENCRYPTION: str = "tls"
    MAIL_FROM_ADDRESS: str = "example@localhost"
    MAIL_FROM_NAME: str = "Caravan"

    EMAIL_RELAY_URL: str = ""
    EMAIL_RELAY_API_KEY: str = ""
    EMAIL_RELAY_TIMEOUT: int = 30

    # ── JWT / Auth ──────────────────────────────
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    ALGORITHM: str = "HS256"

    # ── One-time codes ──────────────────────────
    OTP_LENGTH: int = 6
    OTP_TTL_SECONDS: int = 600

    # ── Trust ───────────────────────────────────
    VOUCH_VERIFICATION_THRESHOLD: int = 3

    # ── RevenueCat ──────────────────────────────
    REVENUECAT_API_KEY: Optional[str] = None
    REVENUECAT_API_URL: str = "https://api.revenuecat.com/v1"
    REVENUECAT_API_TIMEOUT: float = 10.0
    # Value RevenueCat sends in the Authorization header of webhook calls
    REVENUECAT_WEBHOOK_AUTH: Optional[str] = None

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
