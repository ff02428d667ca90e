from pydantic_settings import BaseSettings
from pydantic import ConfigDict
import os


class Settings(BaseSettings):
    # ─────────────────────────────────────────────
    # App Identity
    # ─────────────────────────────────────────────
    APP_NAME: str = "CBODY Partner API"
    APP_ENV: str = "development"
    API_V1_PREFIX: str = "/api/v1"

    # ─────────────────────────────────────────────
    # Request Controls
    # ─────────────────────────────────────────────
    MAX_REQUEST_SIZE: int = 1_048_576

    # ─────────────────────────────────────────────
    # Rate Limiting
    # ─────────────────────────────────────────────
    # Fallback quotas when an API key row has no explicit limits
    DEFAULT_RATE_LIMIT_PER_MINUTE: int = 100
    DEFAULT_RATE_LIMIT_PER_HOUR: int = 1000
    IP_RATE_LIMIT_PER_HOUR: int = 1000
    RATE_LIMIT_REAPER_INTERVAL_SECONDS: int = 300
    RATE_LIMIT_REAPER_ENABLED: bool = True

    # ─────────────────────────────────────────────
    # HTTPS Enforcement
    # ─────────────────────────────────────────────
    ENV: str = "development"
    ENFORCE_HTTPS: bool = False

    # ─────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────
    LOG_FORMAT: str = "text"
    LOG_LEVEL: str = "INFO"

    # ─────────────────────────────────────────────
    # Database
    # ─────────────────────────────────────────────
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./partner_api.db")

    # Pydantic v2 config
    model_config = ConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()
