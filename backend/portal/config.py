"""
Application Configuration — Environment & Settings
Centralizes all config from .env with Pydantic Settings for validation.
Secrets (gateway key secret, JWT secret, oracle API key) are loaded once here
and must never be logged.
"""
from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings

# Resolve paths relative to backend/ directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Core ---
    APP_NAME: str = "Coaching Portal Settlement API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = ["*"]

    # --- Student Record Store ---
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'data' / 'coaching_portal.db'}"
    STORE_TIMEOUT_SECONDS: float = 5.0
    ATTENDANCE_BATCH_LIMIT: int = 500
    DEFAULT_FEE_AMOUNT: int = 50000  # paise (₹500)

    # --- Identity oracle ---
    IDENTITY_ORACLE: str = "jwt"  # jwt | http
    IDENTITY_ORACLE_URL: str = ""
    IDENTITY_ORACLE_API_KEY: str = ""
    JWT_SECRET: str = "coaching-portal-dev-secret-change-in-production"
    JWT_ALG: str = "HS256"
    ORACLE_TIMEOUT_SECONDS: float = 5.0

    # --- Payment gateway ---
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    RAZORPAY_API_URL: str = "https://api.razorpay.com/v1"
    PAYMENT_CURRENCY: str = "INR"
    GATEWAY_TIMEOUT_SECONDS: float = 10.0
    ORDER_RATE_LIMIT_REQUESTS: int = 5
    ORDER_RATE_LIMIT_WINDOW: int = 60

    # --- Logging ---
    LOG_DIR: str = str(BASE_DIR / "logs")
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
