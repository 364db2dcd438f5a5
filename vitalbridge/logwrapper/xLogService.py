from __future__ import annotations

import logging
import logging.config
import os
from typing import Any, Dict, Optional

LINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)-10s | %(name)s | %(message)s"


def _handlers(settings: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "level": str(settings.get("console_level") or "INFO").upper(),
            "formatter": "line",
        }
    }
    path = settings.get("file_path")
    if path:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(path),
            "maxBytes": int(settings.get("rotate_bytes") or 1024 * 1024),
            "backupCount": int(settings.get("backup_count") or 3),
            "encoding": "utf-8",
            "level": "DEBUG",
            "formatter": "line",
        }
    return handlers


def init_logging(settings: Optional[Dict[str, Any]] = None) -> None:
    """Route every logger (bridge, uvicorn, warnings) to console and file.

    ``settings`` is the ``logging`` section of the gateway config.
    LOG_LEVEL and LOG_FILE win over it; ``LOG_FILE=`` (empty) turns the
    file log off.
    """
    settings = dict(settings or {})
    if os.getenv("LOG_LEVEL"):
        settings["console_level"] = os.environ["LOG_LEVEL"]
    if "LOG_FILE" in os.environ:
        settings["file_path"] = os.environ["LOG_FILE"]

    handlers = _handlers(settings)
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"line": {"format": LINE_FORMAT, "datefmt": "%H:%M:%S"}},
            "handlers": handlers,
            "root": {"level": "DEBUG", "handlers": list(handlers)},
            "loggers": {
                name: {"level": str(level).upper()}
                for name, level in (settings.get("module_levels") or {}).items()
            },
        }
    )
    logging.captureWarnings(True)
