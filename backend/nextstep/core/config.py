"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "NextStep Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://nextstep@localhost:5432/nextstep"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "nextstep"
    opik_workspace: str | None = None
    opik_host: str | None = None
    # Calendar days (streaks, "today") and session start hours are read in this zone.
    user_timezone: str = "UTC"
    session_history_limit: int = 50
    export_version: int = 1


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
