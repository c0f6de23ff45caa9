"""Application configuration via Pydantic Settings."""

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./bidtracker.db"

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://"""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Fetch pipeline
    CACHE_TTL_SECONDS: float = 60 * 5
    REQUEST_TIMEOUT_SECONDS: float = 5.0
    MAX_RETRIES: int = 3
    RETRY_DELAY_SECONDS: float = 1.0

    # Card Hobby
    # Card Hobby reports end times shifted from UTC; subtracted during extraction.
    CARDHOBBY_TIME_OFFSET_HOURS: int = 12
    CARDHOBBY_MAX_REQUESTS: int = 10
    CARDHOBBY_TIME_WINDOW_SECONDS: float = 60.0

    # eBay API
    EBAY_CLIENT_ID: str = ""
    EBAY_CLIENT_SECRET: str = ""
    EBAY_ENVIRONMENT: str = "SANDBOX"  # 'PRODUCTION' or 'SANDBOX'
    EBAY_MARKETPLACE_ID: str = "EBAY_US"
    EBAY_MAX_REQUESTS: int = 5
    EBAY_TIME_WINDOW_SECONDS: float = 60.0

    # Background refresh
    REFRESH_INTERVAL_MINUTES: int = 15

    # Exchange rate (CAD -> USD)
    EXCHANGE_RATE_API_URL: str = "https://api.exchangerate-api.com/v4/latest/CAD"
    EXCHANGE_RATE_FALLBACK: float = 0.74
    EXCHANGE_RATE_TTL_SECONDS: int = 3600  # 1 hour

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    @property
    def ebay_base_url(self) -> str:
        """Return the eBay API host for the configured environment."""
        if self.EBAY_ENVIRONMENT.upper() == "PRODUCTION":
            return "https://api.ebay.com"
        return "https://api.sandbox.ebay.com"


settings = Settings()
