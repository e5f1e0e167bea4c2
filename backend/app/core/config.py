"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "FocusFlow AI Backend"
    debug: bool = False
    log_level: str = "INFO"

    # Preferred provider name moved to the front of the fallback chain (groq, gemini, huggingface).
    ai_provider: str | None = None
    ai_request_timeout_seconds: float = 60.0
    ai_warmup_retry_seconds: float = 20.0

    groq_api_key: str | None = None
    groq_model: str = "llama-3.3-70b-versatile"
    groq_base_url: str = "https://api.groq.com/openai/v1"

    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    huggingface_api_key: str | None = None
    huggingface_model: str = "mistralai/Mistral-7B-Instruct-v0.2"
    huggingface_base_url: str = "https://api-inference.huggingface.co/models"

    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "focusflow"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
