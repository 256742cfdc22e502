"""Configuration management for Thumbcraft.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the THUMBCRAFT_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (THUMBCRAFT_* prefix)
2. .env file in the project root
3. Default values defined in ThumbcraftConfig

The Gemini API key is the one exception to the prefix rule.  Besides
``THUMBCRAFT_GEMINI_API_KEY`` it is also read from the names the Google SDKs
and earlier deployments use: ``GEMINI_API_KEY``,
``GOOGLE_GENERATIVE_AI_API_KEY`` and ``GOOGLE_API_KEY``.

Example .env file:
    THUMBCRAFT_GEMINI_API_KEY=your-key
    THUMBCRAFT_IMAGE_MODEL=gemini-2.5-flash-image
    THUMBCRAFT_REQUEST_TIMEOUT_SECONDS=90
    THUMBCRAFT_REFERENCE_DIR=static/references

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The FastAPI application factory falls back to it when no explicit
configuration is passed in.

Usage Example
-------------
    from thumbcraft.core.config import config

    print(config.image_model)
    print(config.reference_dir)

Directory Management
--------------------
The configuration automatically creates required directories on initialization:
- reference_dir: Blank reference images, one per aspect ratio
- data_dir: JSON persistence (saved templates)
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ThumbcraftConfig(BaseSettings):
    """Main configuration for Thumbcraft.

    Attributes
    ----------
    Provider Settings:
        gemini_api_key : str | None
            API key for the Gemini image model.  When unset, every generation
            request fails with a configuration error.
        image_model : str
            Gemini model identifier used for thumbnail generation
        request_timeout_seconds : float
            Upper bound on a single provider call

    Request Limits:
        max_user_image_bytes : int
            Largest decoded user image accepted by ``POST /api/image``

    Paths:
        reference_dir : Path
            Directory holding the blank reference PNGs
        data_dir : Path
            Directory for JSON persistence (``templates.json``)
        render_missing_references : bool
            Render missing reference PNGs on application startup

    Server Settings:
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)
        log_level : str
            Root logging level used by the CLI entry point
        cors_allow_origins : list[str]
            Origins allowed by the CORS middleware

    Examples
    --------
        >>> custom_config = ThumbcraftConfig(
        ...     gemini_api_key="test-key",
        ...     request_timeout_seconds=30,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="THUMBCRAFT_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Provider settings
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "thumbcraft_gemini_api_key",
            "gemini_api_key",
            "google_generative_ai_api_key",
            "google_api_key",
        ),
        description="API key for the Gemini image model",
    )
    image_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Gemini model identifier used for thumbnail generation",
    )
    request_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        le=600,
        description="Timeout for a single provider call, in seconds",
    )

    # Request limits
    max_user_image_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1024,
        description="Largest decoded user image accepted, in bytes",
    )

    # Paths
    reference_dir: Path = Field(
        default=Path("static/references"),
        description="Directory holding one blank reference PNG per aspect ratio",
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for JSON persistence",
    )
    render_missing_references: bool = Field(
        default=True,
        description="Render missing reference PNGs on startup",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=8000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Root logging level",
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.reference_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def templates_path(self) -> Path:
        """Location of the saved-template JSON file."""
        return self.data_dir / "templates.json"


# Global configuration instance
# Loaded from environment variables (THUMBCRAFT_* prefix) and the .env file.
config = ThumbcraftConfig()
