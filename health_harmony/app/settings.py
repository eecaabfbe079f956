from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Keys must be provided via env / .env (never hardcode secrets in code)
    openai_api_key: str | None = None
    langsmith_api_key: str | None = None
    langsmith_project: str | None = None
    langchain_tracing_v2: bool = False
    model_name: str = "gpt-4o-mini"
    temperature: float = 0.2
    request_timeout: float = 30.0

    # Supabase backs auth and profile documents; both unset means session-only profiles
    supabase_url: str | None = None
    supabase_key: str | None = None
    profiles_table: str = "profiles"

    max_photos: int = 5
    min_input_length: int = 2
    max_suggestions: int = 5
    suggestion_debounce_seconds: float = 0.3

    # idle sessions are dropped after this long; the registry never holds more than max_sessions
    session_ttl_seconds: float = 3600.0
    max_sessions: int = 1000

    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


settings = Settings()  # load once at import
