"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (defaults to SQLite for local dev, use PostgreSQL in production)
    database_url: str = "sqlite:///./form_intake.db"

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Logging
    log_level: str = "INFO"

    # AI form generation (falls back to the demo structure when unset)
    openai_api_key: Optional[str] = None
    openai_vision_model: str = "gpt-4o"
    openai_text_model: str = "gpt-4o"
    openai_max_tokens: int = 4000
    openai_timeout: float = 120.0

    # Upload limits
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB

    # Review workflow
    default_reviewers: str = "admin,reviewer1,reviewer2"
    allow_return_from_submitted: bool = True

    # Debug mode
    debug: bool = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def default_reviewers_list(self) -> List[str]:
        """Parse reviewer identities from comma-separated string."""
        return [r.strip() for r in self.default_reviewers.split(",") if r.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
