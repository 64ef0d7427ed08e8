"""
Structured logging.

Modules obtain a logger with get_logger(__name__) and log a short message
plus key/value context:

    logger.info("Device registered", owner=email, device_id=device_id)

setup_logging() routes structlog through the standard logging module so
the same events reach stdout and a size-rotated log file.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from .config_loader import LoggingSettings


def setup_logging(settings: Optional["LoggingSettings"] = None) -> None:
    """Configure structlog and the root logger from LoggingSettings."""
    level_name = (settings.level if settings else "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    fmt = settings.format if settings else "console"

    handlers = [logging.StreamHandler(sys.stdout)]
    if settings and settings.file_path:
        log_path = Path(settings.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_path,
                maxBytes=settings.max_bytes,
                backupCount=settings.backup_count,
                encoding="utf-8",
            )
        )

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    """Return a structlog logger bound to the module name."""
    return structlog.get_logger(name)
