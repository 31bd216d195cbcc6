"""
Application settings.
"""

import logging
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings


# Project root (where .env lives)
PROJECT_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Bot settings."""

    # Application
    APP_NAME: str = "LafdaClub"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Telegram Bot
    BOT_TOKEN: str = ""

    # Backend REST API
    API_BASE_URL: str = "http://localhost:5000/api/"
    API_TIMEOUT: float = 10.0

    # Store
    STORE_NAME: str = "LFDC"
    CURRENCY: str = "INR"
    PRODUCT_SIZES: List[str] = ["S", "M", "L", "XL"]
    DEFAULT_SIZE: str = "M"

    # Hosted checkout (Telegram Payments provider token)
    PAYMENT_PROVIDER_TOKEN: str = ""

    # Idle chats drop their backend session after this many seconds
    SESSION_IDLE_TIMEOUT: float = 86400.0
    SESSION_SWEEP_INTERVAL: float = 600.0

    # Review section paging
    REVIEWS_PAGE_SIZE: int = 3
    COMMENTS_PAGE_SIZE: int = 3

    class Config:
        env_file = str(ENV_FILE)
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()

logger.debug("Loading settings from %s (exists: %s)", ENV_FILE, ENV_FILE.exists())
