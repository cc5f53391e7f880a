# app/config.py

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Literal, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Checkmate API"
    app_env: str = "development"
    debug: bool = True
    frontend_url: str = "http://localhost:5173"
    log_level: str = "INFO"

    # Anthropic (Claude) - check image analysis
    anthropic_api_key: Optional[str] = None
    vision_model: str = "claude-sonnet-4-20250514"
    vision_max_tokens: int = 300
    # Forward images to another instance's /analyze-check instead of calling Claude
    vision_relay_url: Optional[str] = None

    # Analysis queue
    analysis_concurrency: int = 1
    analysis_retries: int = 0
    max_images: int = 100

    # Matching rules storage
    rule_store: Literal["file", "supabase"] = "file"
    rules_path: str = ".checkmate/matching_rules.json"

    # Supabase (auth + per-user rule storage)
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    # Auth
    require_auth: bool = False
    allowed_emails: str = ""  # comma-separated; empty allows everyone

    @property
    def allowed_email_list(self) -> list[str]:
        return [
            email.strip().lower()
            for email in self.allowed_emails.split(",")
            if email.strip()
        ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
