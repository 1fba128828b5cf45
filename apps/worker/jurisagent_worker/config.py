from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore", env_file=".env")

    api_base_url: str = "http://api:8000"
    # Comma-separated queries searched on every cycle.
    worker_queries: str = "tema 246,súmula 331,repetitivo"
    worker_scope: str = Field(default="all", pattern="^(all|temas|vinculantes)$")
    worker_interval_seconds: int = 900
    worker_output_dir: str = "/tmp/jurisagent_worker"
    # Must outlive the slowest court timeout on the API side.
    worker_timeout_seconds: float = 30.0

    @property
    def queries(self) -> list[str]:
        return [q.strip() for q in self.worker_queries.split(",") if q.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
