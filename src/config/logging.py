"""
Logging Configuration
====================

Structured logging configuration with environment-specific settings.
Uses structlog for structured logging with JSON output in production.
"""

import logging
import logging.config
import sys
from typing import Dict, Any, TYPE_CHECKING
import structlog
from structlog.types import Processor

from .settings import get_settings

if TYPE_CHECKING:
    from .settings import Settings


def setup_logging() -> None:
    """Setup application logging configuration."""
    settings = get_settings()

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.environment == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.environment != "testing"))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(get_logging_config(settings))


def get_logging_config(settings: "Settings") -> Dict[str, Any]:
    """Get logging configuration dictionary."""
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.log_level,
            "formatter": "standard" if settings.environment != "production" else "json",
            "stream": sys.stdout,
        },
    }
    if settings.log_file is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.log_level,
            "formatter": "detailed",
            "filename": str(settings.log_file),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {  # Root logger
                "level": settings.log_level,
                "handlers": list(handlers),
                "propagate": False,
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "playwright": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def ensure_log_directories() -> None:
    """Ensure the log file directory exists."""
    settings = get_settings()
    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)


# Initialize logging on import
ensure_log_directories()
setup_logging()
