"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - External content generation is enabled only when BOTH api key and model are set

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Empty database_url selects the file backend: works out-of-the-box without a database
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # State store
    database_url: str = ""

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    store_file_path: str = "data/store.json"
    store_lock_key: int = 1947001
    store_create_schema: bool = True

    # Content generation (Anthropic)
    anthropic_api_key: str = ""
    content_model: str = ""
    content_max_tokens: int = 4096
    content_timeout_seconds: int = 60

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def content_generation_enabled(self) -> bool:
        return bool(self.anthropic_api_key and self.content_model)


@lru_cache
def get_settings() -> Settings:
    return Settings()
