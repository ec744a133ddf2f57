from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    project_name: str = "Travel Plans API"
    api_prefix: str = "/api"

    openai_api_key: str = Field(default="", description="Optional OpenAI API key")
    openai_model_plans: str = "gpt-3.5-turbo"
    openai_max_completion_tokens: int = 2000
    openai_timeout_seconds: float = 30.0
    openai_max_retries: int = 1

    rate_limit_max_attempts: int = Field(default=3, ge=1)
    rate_limit_block_seconds: int = Field(default=60, ge=1)
    rate_limit_max_clients: int = Field(default=10_000, ge=1)
    rate_limit_idle_ttl_seconds: int = Field(default=24 * 60 * 60, ge=1)
    trust_forwarded_for: bool = True

    require_all_categories: bool = False

    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    use_supabase: bool = False

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
