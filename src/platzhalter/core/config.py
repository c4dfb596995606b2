"""Configuration management for Platzhalter.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PLATZHALTER_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PLATZHALTER_* prefix)
2. .env file in the project root
3. Default values defined in PlatzhalterConfig

Example .env file:
    PLATZHALTER_SERVER_HOST=0.0.0.0
    PLATZHALTER_SERVER_PORT=8000
    PLATZHALTER_LOG_LEVEL=DEBUG
    PLATZHALTER_DB_DIR=/var/lib/platzhalter

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from platzhalter.core.config import config

    print(config.server_port)
    print(config.db_dir)

Fonts
-----
``label_font`` and ``watermark_font`` are handed to Pillow's
``ImageFont.truetype``, which accepts either an absolute path or a bare file
name that is looked up in the system font directories.  When neither
resolves, the renderer falls back to Pillow's bundled scalable font.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlatzhalterConfig(BaseSettings):
    """Main configuration for the Platzhalter placeholder service.

    Attributes
    ----------
    Server Settings:
        server_host : str
            Address uvicorn binds to
        server_port : int
            Port uvicorn listens on (1-65535)
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            Root log level applied by ``main()``
        cors_max_age : int
            Seconds browsers may cache the CORS preflight response

    Storage:
        db_dir : Path
            Directory holding the embedded image store (created on init)
        strict_cache_writes : bool
            Fail the request when storing a fresh render fails.  When False the
            rendered image is still returned and the failure is only logged.

    Rendering:
        max_dimension : int
            Largest accepted width or height
        label_font : str
            Bold font used for the dimension label
        watermark_font : str
            Regular font used for the watermark
        watermark_text : str
            Text drawn in the bottom-right corner of wide images

    Notes
    -----
    - Configuration is immutable after initialization
    - To modify config, set environment variables and restart the application

    Examples
    --------
        >>> custom_config = PlatzhalterConfig(server_port=9000, db_dir="/tmp/ph")
        >>> custom_config.db_dir.exists()
        True
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PLATZHALTER_",
        case_sensitive=False,
    )

    # Server settings
    server_host: str = Field(
        default="127.0.0.1",
        description="Server bind address",
    )
    server_port: int = Field(
        default=8080,
        description="Server port",
        ge=1,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log verbosity for the platzhalter loggers",
    )
    cors_max_age: int = Field(
        default=3600,
        description="Max age of cached CORS preflight responses in seconds",
        ge=0,
    )

    # Storage
    db_dir: Path = Field(
        default=Path("platzhalter_db"),
        description="Directory of the embedded image store",
    )
    strict_cache_writes: bool = Field(
        default=True,
        description="Treat a failed cache write as a failed request",
    )

    # Rendering
    max_dimension: int = Field(
        default=3000,
        description="Largest accepted width or height in pixels",
        ge=10,
    )
    label_font: str = Field(
        default="DejaVuSans-Bold.ttf",
        description="Bold TrueType font for the dimension label",
    )
    watermark_font: str = Field(
        default="DejaVuSans.ttf",
        description="Regular TrueType font for the watermark",
    )
    watermark_text: str = Field(
        default="powered by platzhalter",
        description="Watermark drawn on images at least 200 pixels wide",
        min_length=1,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the store directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.db_dir.mkdir(parents=True, exist_ok=True)

    @property
    def db_path(self) -> Path:
        """Location of the image store file inside ``db_dir``."""
        return self.db_dir / "images.sqlite3"


# Global configuration instance
# Loads values from environment variables (PLATZHALTER_* prefix) and .env file.
config = PlatzhalterConfig()
