"""
Configuration module for the avatar studio service.

Uses pydantic-settings for environment-based configuration with sensible defaults.
"""

import pathlib
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


_PROJECT_DIR = pathlib.Path(__file__).parent.parent
_DEFAULT_TEMPLATES_DIR = _PROJECT_DIR / "templates"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Example: GEMINI_API_KEY=mysecretkey
    """

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    # Remote generative API
    GEMINI_API_KEY: str | None = Field(
        default=None,
        description="API key for the Gemini generative image API"
    )
    GEMINI_MODEL: str = Field(
        default="gemini-2.5-flash-image-preview",
        description="Model identifier used for every generateContent call"
    )
    GEMINI_BASE_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini REST API"
    )

    # Template catalog
    TEMPLATES_DIR: str = Field(
        default=str(_DEFAULT_TEMPLATES_DIR),
        description="Directory holding template.json and images/template<N>.jpg"
    )

    # Upload constraints
    MAX_UPLOAD_MB: int = Field(
        default=10,
        description="Maximum upload file size in megabytes"
    )
    MIN_WIDTH: int = Field(
        default=400,
        description="Minimum accepted upload width in pixels"
    )
    MIN_HEIGHT: int = Field(
        default=400,
        description="Minimum accepted upload height in pixels"
    )

    # Localization
    DEFAULT_LOCALE: str = Field(
        default="zh",
        description="Locale used when a request does not name one"
    )

    # Service metadata
    SERVICE_NAME: str = Field(
        default="avatar-studio",
        description="Service name for logging and health checks"
    )
    SERVICE_VERSION: str = Field(
        default="1.0.0",
        description="Service version"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level for the service loggers"
    )


# Singleton settings instance
settings = Settings()
