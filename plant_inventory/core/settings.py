from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from plant_inventory.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Plant Inventory API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Spare-part inventory for factory sectors and machines: stock, usage log, "
            "machine assignments, purchase lists and AI-assisted reorder suggestions."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    AUTO_SEED: bool = Field(
        default=False,
        description="If true, seed sample sectors, machines and items after migrations.",
    )

    # Tokens
    JWT_SECRET_KEY: str = Field(default="change-me", description="HMAC secret for JWT signing")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7)

    # Reorder recommendation service
    OPENAI_API_KEY: Optional[str] = Field(default=None, description="API key for the recommendation model")
    OPENAI_BASE_URL: Optional[str] = Field(
        default=None, description="Override for OpenAI-compatible endpoints"
    )
    AI_MODEL: str = Field(default="gpt-4o-mini")
    AI_TIMEOUT_SECONDS: float = Field(default=60.0)
    AI_UNIT_PRICE: float = Field(default=10.0, description="Assumed price per unit for value estimates")
    REORDER_THRESHOLD_DEFAULT: int = Field(default=2, ge=0)
    LEAD_TIME_DAYS_DEFAULT: int = Field(default=7, ge=0)

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    Note:
      Constructed on every call so tests can change the environment between calls.
    """
    return AppSettings()
