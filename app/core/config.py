from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "PDF Tutor Chat"
    environment: str = Field(default="development")

    # OpenAI
    openai_api_key: Optional[str] = None
    chat_model: str = "gpt-4o-mini"
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 1024

    # Attachments
    accepted_media_type: str = "application/pdf"
    max_input_chars: int = 8000

    # Durable storage (one JSON blob per user key)
    storage_dir: str = Field(default=".tutor_chat")
    storage_quota_bytes: int = 5 * 1024 * 1024

    # Reveal animation
    reveal_step_chars: int = Field(default=3, ge=1)
    reveal_interval_ms: int = Field(default=20, ge=0)

    # Auth: provider name from the [auth] secrets block, or None for default
    auth_provider: Optional[str] = None
    auth_disabled: bool = False

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


def get_settings() -> Settings:
    return Settings()
