"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://kondo:kondo@db:5432/kondo"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Text completion (Anthropic)
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_timeout_seconds: int = 120
    completion_model: str = "claude-sonnet-4-5"
    completion_max_tokens: int = 2048

    # Speech synthesis (ElevenLabs)
    elevenlabs_api_key: str = "elevenlabs-placeholder"
    elevenlabs_base_url: str = "https://api.elevenlabs.io"
    elevenlabs_model_id: str = "eleven_flash_v2_5"
    elevenlabs_timeout_seconds: float = 60.0

    # Sharing / import
    reserved_collection_titles: list[str] = [
        "all responses", "daily summary", "search",
    ]
    default_post_label: str = "Untitled"
    import_batch_size: int = 50

    # Streaks
    default_timezone: str = "UTC"

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
