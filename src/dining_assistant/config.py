"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    google_generative_ai_api_key: str | None = None
    google_generative_ai_api_key_2: str | None = None
    google_generative_ai_api_key_3: str | None = None
    google_generative_ai_api_key_4: str | None = None
    google_generative_ai_api_key_5: str | None = None
    llm_model: str = "gemini-2.0-flash"
    llm_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    nutrition_portal_base_url: str = "https://menuportal23.dining.rutgers.edu/foodpronet/"
    portal_timeout_seconds: float = 15
    summary_truncation_threshold: int = 8000
    summary_items_per_category: int = 5
    menu_cache_ttl_seconds: int = 3600
    nutrition_cache_ttl_seconds: int = 86400
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def api_keys(self) -> list[str]:
        """Return the configured LLM keys in rotation order, skipping blanks."""
        keys = [
            self.google_generative_ai_api_key,
            self.google_generative_ai_api_key_2,
            self.google_generative_ai_api_key_3,
            self.google_generative_ai_api_key_4,
            self.google_generative_ai_api_key_5,
        ]
        return [key.strip() for key in keys if key and key.strip()]

    def uses_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)
