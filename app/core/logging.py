"""Logging setup: console plus rotating error/combined files."""

import logging.config
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"
# Per-file rotation: 10 MB, keep 5 backups.
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 5


def build_logging_config(settings: "Settings") -> dict[str, Any]:
    """Return a dictConfig for the app; file handlers only when LOG_DIR is set."""
    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "default",
        },
    }
    log_dir = settings.LOG_DIR.strip()
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        for name, filename, level in (
            ("error_file", "error.log", "ERROR"),
            ("combined_file", "combined.log", "WARNING"),
        ):
            handlers[name] = {
                "class": "logging.handlers.RotatingFileHandler",
                "level": level,
                "formatter": "default",
                "filename": str(Path(log_dir) / filename),
                "maxBytes": LOG_FILE_MAX_BYTES,
                "backupCount": LOG_FILE_BACKUP_COUNT,
                "encoding": "utf-8",
            }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": LOG_DATEFMT},
        },
        "handlers": handlers,
        "loggers": {
            "app": {
                "level": settings.LOG_LEVEL,
                "handlers": list(handlers),
                "propagate": False,
            },
        },
    }


def configure_logging(settings: "Settings") -> None:
    logging.config.dictConfig(build_logging_config(settings))
