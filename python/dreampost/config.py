"""Application settings loaded from environment variables.

Environment Configuration:
    DREAMPOST_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: SQLAlchemy connection string (optional)
        When unset, postcards live in the in-memory store.

Generator Configuration:
    OPENAI_API_KEY: Provider key (required in staging/prod)
        When unset, every postcard gets the fallback caption and image.
    OPENAI_BASE_URL: Provider base URL
    AUDIO_ANALYSIS_MODEL / CAPTION_MODEL / IMAGE_MODEL: Model names
    LLM_TIMEOUT_S: Per-request provider timeout in seconds

Behavior Flags:
    SEED_DEMO_DATA: Insert the demo users and postcards at startup
    ENFORCE_TRADE_INTEGRITY: Reject trades that reference unknown records
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Validation rules:
    - OPENAI_API_KEY is required in staging and prod only
    - LLM_TIMEOUT_S must be within 1..300 seconds
    """

    dreampost_env: Environment = Field(default=Environment.LOCAL, alias="DREAMPOST_ENV")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")

    # Generator settings
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    audio_analysis_model: str = Field(
        default="gpt-4o-audio-preview", alias="AUDIO_ANALYSIS_MODEL"
    )
    caption_model: str = Field(default="gpt-4o", alias="CAPTION_MODEL")
    image_model: str = Field(default="dall-e-3", alias="IMAGE_MODEL")
    llm_timeout_s: int = Field(default=45, alias="LLM_TIMEOUT_S")

    # Behavior flags
    seed_demo_data: bool = Field(default=False, alias="SEED_DEMO_DATA")
    enforce_trade_integrity: bool = Field(default=False, alias="ENFORCE_TRADE_INTEGRITY")

    # Serving
    log_json: bool = Field(default=True, alias="LOG_JSON")
    cors_origins: str = Field(default="", alias="CORS_ORIGINS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("llm_timeout_s")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value < 1 or value > 300:
            raise ValueError("LLM_TIMEOUT_S must be between 1 and 300 seconds")
        return value

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure deployed environments can reach the generator."""
        if self.dreampost_env in (Environment.STAGING, Environment.PROD):
            if not self.openai_api_key:
                raise ValueError(
                    f"OPENAI_API_KEY is required for DREAMPOST_ENV={self.dreampost_env.value}"
                )
        return self

    @property
    def uses_sql_storage(self) -> bool:
        """Whether postcards are persisted in a SQL database."""
        return bool(self.database_url)

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
