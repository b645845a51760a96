"""Application configuration management using Pydantic Settings."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application Environment
    app_env: str = Field(default="development", alias="APP_ENV")

    # Flask Configuration
    secret_key: str = Field(..., alias="SECRET_KEY")
    flask_env: str = Field(default="development", alias="FLASK_ENV")

    # Plan Storage Configuration
    storage_type: str = Field(default="local", alias="STORAGE_TYPE")
    storage_base_path: str = Field(default="storage", alias="STORAGE_BASE_PATH")

    # Monte Carlo Configuration
    monte_carlo_iterations: int = Field(
        default=1000, ge=1, alias="MONTE_CARLO_ITERATIONS"
    )
    monte_carlo_max_iterations: int = Field(
        default=10000, ge=1, alias="MONTE_CARLO_MAX_ITERATIONS"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v):
        """Ensure SECRET_KEY is provided and not a placeholder."""
        if not v or v == "your-secret-key-here-change-in-production":
            raise ValueError("SECRET_KEY must be set to a secure value")
        return v

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v):
        """Validate application environment."""
        allowed_envs = {"development", "testing", "production"}
        if v not in allowed_envs:
            raise ValueError(f"APP_ENV must be one of {allowed_envs}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator("storage_type")
    @classmethod
    def validate_storage_type(cls, v):
        """Validate storage type."""
        allowed_types = {"local", "memory"}
        if v not in allowed_types:
            raise ValueError(f"STORAGE_TYPE must be one of {allowed_types}")
        return v


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Get application settings instance."""
    if env_file is not None:
        return Settings(_env_file=env_file)
    return Settings()


# Global settings instance - created on first use
_settings: Optional[Settings] = None


def get_global_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings


def reset_global_settings() -> None:
    """Reset global settings instance (useful for testing)."""
    global _settings
    _settings = None
