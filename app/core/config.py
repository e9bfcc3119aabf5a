"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, bot token, RPC endpoint, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="roscabot",
        description="MongoDB database name"
    )
    MONGODB_MAX_POOL_SIZE: int = Field(default=50, ge=1)
    MONGODB_CONNECT_RETRIES: int = Field(
        default=3,
        ge=1,
        description="Startup connection attempts before giving up"
    )

    # Telegram
    TELEGRAM_BOT_TOKEN: Optional[str] = Field(
        default=None,
        description="Telegram Bot API token"
    )
    TELEGRAM_API_BASE: str = Field(
        default="https://api.telegram.org",
        description="Telegram Bot API base URL"
    )
    TELEGRAM_WEBHOOK_SECRET: Optional[str] = Field(
        default=None,
        description="Secret token echoed by Telegram in webhook requests"
    )
    TELEGRAM_TIMEOUT: float = Field(
        default=10.0,
        description="Telegram API request timeout in seconds"
    )

    # Chain
    RPC_URL: str = Field(
        default="http://localhost:8545",
        description="JSON-RPC endpoint of the chain hosting the ROSCA contracts"
    )
    CHAIN_ID: int = Field(
        default=296,
        description="Chain id included in prepared transactions"
    )
    REGISTRY_CONTRACT_ADDRESS: str = Field(
        default="0x0000000000000000000000000000000000000000",
        description="Address of the ROSCA registry contract"
    )
    NATIVE_SYMBOL: str = Field(
        default="HBAR",
        description="Ticker shown next to native-currency amounts"
    )

    # Wallet linking
    APP_URL: str = Field(
        default="http://localhost:8000",
        description="Public base URL of this service (wallet-signing page host)"
    )
    WALLET_DEEP_LINK_BASE: str = Field(
        default="https://metamask.app.link/dapp",
        description="Mobile wallet deep-link prefix for opening the signing page"
    )
    AUTH_SESSION_TTL_MINUTES: int = Field(
        default=10,
        description="Lifetime recorded on auth session audit records"
    )

    # Group browsing and transaction preparation
    GROUPS_PAGE_SIZE: int = Field(
        default=5,
        description="Number of groups listed per /browse page"
    )
    GAS_CREATE_GROUP: int = Field(default=500000, description="Indicative gas for createGroup")
    GAS_JOIN_GROUP: int = Field(default=200000, description="Indicative gas for joinGroup")
    GAS_CONTRIBUTE: int = Field(default=150000, description="Indicative gas for contribute")

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @field_validator("TELEGRAM_BOT_TOKEN")
    @classmethod
    def validate_bot_token(cls, v, info: ValidationInfo):
        """Ensure the bot token is set in production."""
        if info.data.get("ENVIRONMENT") == "production" and not v:
            raise ValueError("TELEGRAM_BOT_TOKEN is required in production environment")
        return v

    @field_validator("APP_URL", "WALLET_DEEP_LINK_BASE")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.RPC_URL:
        errors.append("RPC_URL is required")

    if settings.is_production:
        if not settings.TELEGRAM_BOT_TOKEN:
            errors.append("TELEGRAM_BOT_TOKEN is required in production")
        if not settings.TELEGRAM_WEBHOOK_SECRET:
            errors.append("TELEGRAM_WEBHOOK_SECRET is required in production")
        if int(settings.REGISTRY_CONTRACT_ADDRESS, 16) == 0:
            errors.append("REGISTRY_CONTRACT_ADDRESS must be set in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
