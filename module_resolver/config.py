"""Configuration module using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Resolver settings loaded from environment variables and .env file.

    Attributes:
        database_url: SQLite database URL for the repository-backed source.
        dependency_tree_max_depth: Default depth for dependency tree expansion.
        strict_cycle_detection: Follow every dependency type during cycle
            detection; when disabled only required edges are followed.
        max_write_attempts: Attempts for an edge write under concurrent
            modification before giving up.
        debug: Enable debug mode.
    """

    model_config = SettingsConfigDict(
        env_prefix="MODULE_RESOLVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./data/modules.db",
        description="Database connection URL",
    )

    # Resolution
    dependency_tree_max_depth: int = Field(
        default=5,
        ge=0,
        description="Default maximum depth for dependency trees",
    )
    strict_cycle_detection: bool = Field(
        default=True,
        description="Detect cycles across all dependency types",
    )

    # Graph mutation
    max_write_attempts: int = Field(
        default=3,
        ge=1,
        description="Edge write attempts under concurrent modification",
    )

    # Debug Mode
    debug: bool = Field(default=False, description="Enable debug mode")


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
