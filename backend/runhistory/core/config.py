from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    app_name: str = "Run History API"
    log_level: str = "INFO"

    run_api_base_url: str = "https://run-api.example.com"
    run_api_terms_path: str = "/school/terms"
    run_api_months_path: str = "/school/months"
    run_api_records_path: str = "/sunrun/records"
    run_api_timeout_s: float = 20.0
    run_api_user_agent: str = "RunHistory/1.0"

    history_page_size: int = 10
    history_max_pages: int = 20


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
