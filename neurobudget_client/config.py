"""
Configuration module using Pydantic Settings.
Handles all environment variables and client configuration.
"""

import os
from functools import lru_cache
from typing import Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NEUROBUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # App settings
    app_name: str = Field(default="neurobudget-client", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="production", description="Environment name")

    # API
    api_base_url: str = Field(
        default="http://192.168.1.100:8080/api",
        description="Base URL of the NeuroBudget backend, including the /api prefix"
    )
    request_timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds")
    user_agent: str = Field(default="NeuroBudget-Client/1.0", description="User-Agent header for outgoing requests")

    # Session storage
    session_backend: str = Field(default="file", description="Session storage backend: file or memory")
    session_file_path: str = Field(
        default="~/.neurobudget/session.json",
        description="Path of the persisted session document"
    )

    # Monitoring and logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=True, description="Render log lines as JSON")

    @validator("log_level")
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @validator("environment")
    def validate_environment(cls, v):
        """Validate environment."""
        valid_envs = ["development", "testing", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Invalid environment. Must be one of: {valid_envs}")
        return v.lower()

    @validator("session_backend")
    def validate_session_backend(cls, v):
        """Validate session storage backend."""
        valid_backends = ["file", "memory"]
        if v.lower() not in valid_backends:
            raise ValueError(f"Invalid session backend. Must be one of: {valid_backends}")
        return v.lower()

    @validator("api_base_url")
    def strip_trailing_slash(cls, v):
        """Normalize the base URL so relative paths join cleanly."""
        return v.rstrip("/")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def session_path(self) -> Optional[str]:
        """Expanded session file path, or None for the in-memory backend."""
        if self.session_backend == "memory":
            return None
        return os.path.expanduser(self.session_file_path)


@lru_cache()
def get_settings() -> Settings:
    """Get settings instance. Useful for dependency injection."""
    return Settings()
