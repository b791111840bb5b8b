"""Structured logging configuration using dictConfig."""
import logging
import logging.config
import sys
from typing import Dict, Any, Optional

from .settings import Settings, get_settings

CONSOLE_FORMAT = "%(asctime)s [%(service)s] [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(service)s %(name)s %(message)s"


class ServiceNameFilter(logging.Filter):
    """Stamp the running service's name on every record."""

    def __init__(self, service_name: str = "trendbot"):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


def get_logging_config(service_name: Optional[str] = None, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Get logging configuration dictionary.

    Records go to stdout as JSON in production and as plain lines elsewhere.
    """
    settings = settings or get_settings()
    production = settings.environment == "production"

    handler = {"level": settings.log_level, "handlers": ["console"], "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "service": {"()": ServiceNameFilter, "service_name": service_name or settings.app_name},
        },
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": JSON_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "console": {"format": CONSOLE_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": "json" if production else "console",
                "filters": ["service"],
                "stream": sys.stdout,
            }
        },
        "loggers": {
            "trendbot": handler,
            "uvicorn": {**handler, "level": "INFO"},
        },
        "root": {"level": settings.log_level, "handlers": ["console"]},
    }


def setup_logging(service_name: Optional[str] = None, settings: Optional[Settings] = None) -> None:
    """Configure structured logging using dictConfig."""
    logging.config.dictConfig(get_logging_config(service_name, settings))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
