"""Configuration loading and validation"""
import os
from typing import Optional
from dotenv import load_dotenv

from .services.nba_client import NBA_API_BASE
from .services.whop_client import WHOP_API_BASE
from .utils.logger import setup_logger

logger = setup_logger(__name__)

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration"""

    def __init__(self):
        """Load and validate configuration"""
        # Whop configuration
        self.whop_api_key = self._get_required("WHOP_API_KEY")
        self.whop_api_base = os.getenv("WHOP_API_BASE", WHOP_API_BASE)
        self.whop_app_secret: Optional[str] = os.getenv("WHOP_APP_SECRET") or None
        self.default_company_id: Optional[str] = os.getenv("WHOP_COMPANY_ID") or None

        # Trigger surface
        self.cron_secret: Optional[str] = os.getenv("CRON_SECRET") or None
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = self._get_int("PORT", 8000)

        # Storage
        self.database_path = os.getenv("DATABASE_PATH", "data/notifier.db")
        self.state_retention_days = self._get_int("STATE_RETENTION_DAYS", 7)

        # Notification settings
        self.poll_interval = self._get_int("POLL_INTERVAL", 30)
        self.dispatch_max_retries = self._get_int("DISPATCH_MAX_RETRIES", 3)

        # Game data
        self.nba_api_base = os.getenv("NBA_API_BASE", NBA_API_BASE)
        self.http_timeout = self._get_int("HTTP_TIMEOUT", 15)
        self.test_game_speed = self._get_float("TEST_GAME_SPEED", 1.0)

        self._validate()
        logger.info("Configuration loaded successfully")

    def _get_required(self, key: str) -> str:
        """Get required environment variable"""
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Required environment variable {key} is not set")
        return value

    def _get_int(self, key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} must be an integer, got '{value}'") from None

    def _get_float(self, key: str, default: float) -> float:
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"{key} must be a number, got '{value}'") from None

    def _validate(self):
        """Validate configuration values"""
        if self.poll_interval < 5:
            raise ValueError("POLL_INTERVAL must be at least 5 seconds")

        if self.dispatch_max_retries < 1:
            raise ValueError("DISPATCH_MAX_RETRIES must be at least 1")

        if self.state_retention_days < 0:
            raise ValueError("STATE_RETENTION_DAYS must be non-negative")

        if self.test_game_speed <= 0:
            raise ValueError("TEST_GAME_SPEED must be positive")

        if self.http_timeout < 1:
            raise ValueError("HTTP_TIMEOUT must be at least 1 second")

        logger.info(f"Poll interval: {self.poll_interval} seconds")
        logger.info(f"Database: {self.database_path}")
        if not self.cron_secret:
            logger.warning("CRON_SECRET is not set; the cron endpoint accepts any caller")
        if not self.whop_app_secret:
            logger.warning("WHOP_APP_SECRET is not set; admin simulate requests will be rejected")
