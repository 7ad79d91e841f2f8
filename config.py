"""Configuration via pydantic-settings. Reads from .env or environment."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ===== UPSTREAM INTELLIGENCE API =====
    api_url: str = "https://podinsight-api.vercel.app"
    upstream_timeout_seconds: float = 30.0
    search_timeout_seconds: float = 40.0  # Modal cold start ~20s + OpenAI ~10s
    dashboard_episode_limit: int = 8

    # ===== DEMO/LIVE MODE =====
    use_mock_data: bool = True  # Initial data mode; toggled at runtime via /api/data-mode

    # ===== SEARCH CACHE =====
    search_cache_ttl_seconds: float = 300.0
    search_cache_max_entries: int = 100

    # ===== ACCESS CONTROL =====
    basic_auth_password: str = ""  # Empty disables the basic auth gate
    environment: str = "production"  # development | production

    # ===== SYSTEM =====
    log_level: str = "INFO"
    port: int = 8001


settings = Settings()
