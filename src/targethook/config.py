"""Configuration settings for targethook."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from targethook.schemas.targeting import ObjectType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TARGETHOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///targethook.db"
    database_echo: bool = False

    # Hook defaults
    default_object_type_filter: int = int(ObjectType.ALL)

    # Administrative listings
    list_limit: int = 100


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
