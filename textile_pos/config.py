from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "BusyTextile POS"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./textile_pos.db"
    SEED_ON_STARTUP: bool = True

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Shop login
    # ==============================
    SHOP_LOGIN_USERNAME: Optional[str] = None
    SHOP_LOGIN_PASSWORD: Optional[str] = None
    SHOP_LOGIN_PASSWORD_HASH: Optional[str] = None
    SHOP_LOGIN_PASSWORD_SALT: Optional[str] = None
    SHOP_LOGIN_PBKDF2_ROUNDS: int = 200_000
    SESSION_SECRET: Optional[str] = None
    SESSION_COOKIE: str = "pos_session"

    # ==============================
    # Point of sale
    # ==============================
    ALLOW_OVERSELL: bool = True
    INVOICE_PREFIX: str = "INV"
    CURRENCY_SYMBOL: str = "$"
    CART_IDLE_MINUTES: int = 240

    # ==============================
    # Assistant (Gemini)
    # ==============================
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    ASSISTANT_MODEL: str = "gemini-3-pro-preview"
    ASSISTANT_TIMEOUT_SECONDS: int = 60
    ASSISTANT_HISTORY_TURNS: int = 5
    CHAT_IDLE_MINUTES: int = 60

    # ==============================
    # WhatsApp Configuration
    # ==============================
    WHATSAPP_API_URL: Optional[str] = None
    WHATSAPP_ACCESS_TOKEN: Optional[str] = None


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
