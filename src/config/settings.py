"""
Application Settings
===================

Service settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
from pathlib import Path


class Settings(BaseSettings):
    """Render service settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="Render Service", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Local server host")
    port: int = Field(default=8008, description="Local server port")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")

    # Browser Configuration
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    browser_args: List[str] = Field(
        default=[
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
        ],
        description="Chromium launch arguments",
    )

    # Rendering Configuration
    default_viewport_width: int = Field(default=800, gt=0, description="Default viewport width")
    default_viewport_height: int = Field(default=600, gt=0, description="Default viewport height")
    navigation_timeout: int = Field(default=30000, description="Page load timeout in milliseconds")
    navigation_wait_until: str = Field(
        default="load", description="Load condition awaited after navigation"
    )
    script_timeout: int = Field(default=30000, description="Script timeout in milliseconds")
    selector_timeout: int = Field(default=5000, description="Selector wait in milliseconds")
    pdf_print_background: bool = Field(default=True, description="Print backgrounds in PDFs")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("navigation_wait_until")
    @classmethod
    def validate_wait_until(cls, v: str) -> str:
        """Validate the Playwright load condition."""
        allowed = {"load", "domcontentloaded", "networkidle", "commit"}
        if v not in allowed:
            raise ValueError(f"navigation_wait_until must be one of: {allowed}")
        return v

    @field_validator("browser_args", mode="before")
    @classmethod
    def parse_browser_args(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse browser arguments from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string: ["--a", "--b"]
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Handle comma-separated string: "--a,--b"
            return [arg.strip() for arg in v.split(",") if arg.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="RENDER_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
