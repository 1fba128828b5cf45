from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore", env_file=".env")

    app_name: str = "JurisAgentBR API"
    cors_origin: str = "http://localhost:3000"

    # Sent on every outbound request to the court sites.
    user_agent: str = "Mozilla/5.0 (compatible; JurisAgentBR/1.0; +https://example.local)"
    follow_redirects: bool = True

    # Limits applied to the generic court sources.
    default_timeout_ms: int = Field(default=8000, ge=100, le=60000)
    default_max_results: int = Field(default=5, ge=1, le=50)

    min_query_length: int = Field(default=2, ge=1)

    log_level: str = "INFO"
    log_format: str = Field(default="json", pattern="^(json|text)$")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
