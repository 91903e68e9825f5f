"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    APP_NAME: str = "FocusFlow"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENV: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    WORKERS: int = 1

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./focusflow.db"
    DATABASE_ECHO: bool = False
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 15.0

    # AI (any OpenAI-compatible endpoint)
    OPENAI_API_KEY: str | None = None
    OPENAI_API_BASE_URL: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.7

    # Roadmaps
    DEFAULT_TIMELINE_DAYS: int = 30
    MAX_TIMELINE_DAYS: int = 120

    # Background topic content generation
    CONTENT_GENERATION_CONCURRENCY: int = 2

    # Chat
    CHAT_HISTORY_LIMIT: int = 20
    CHAT_PIN_SYSTEM_MESSAGE: bool = False
    CHAT_MAX_SESSIONS: int = 1000
    CHAT_SESSION_TTL_SECONDS: int = 6 * 60 * 60
    CHAT_RESUME_CHAR_LIMIT: int = 2000
    CHAT_TOPIC_CHAR_LIMIT: int = 1000

    # Resume upload
    RESUME_MAX_BYTES: int = 5 * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENV == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
