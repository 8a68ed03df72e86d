"""Logging configuration: console plus optional rotating log file."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger, LoggerFactory, ProcessorFormatter

from .config_loader import ConfigLoader


def setup_logging(config: Optional[ConfigLoader] = None) -> None:
    """Configure structlog on top of stdlib logging.

    Without a config only the console handler is installed at INFO. With a
    config, ``logging.level`` sets the level and a non-empty ``logging.file``
    adds a size-rotated JSON log file.

    Args:
        config: Loaded configuration, or None for bootstrap defaults
    """
    level_name = "INFO"
    log_file = ""
    max_size_mb = 10
    backup_count = 5
    if config is not None:
        level_name = str(config.get("logging.level", "INFO"))
        log_file = config.get("logging.file", "") or ""
        max_size_mb = config.get("logging.max_size_mb", 10)
        backup_count = config.get("logging.backup_count", 5)

    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(level)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if sys.stderr.isatty()
        else structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"])
    )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(ProcessorFormatter(processor=renderer))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=int(max_size_mb) * 1024 * 1024,
            backupCount=int(backup_count),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(
            ProcessorFormatter(processor=structlog.processors.JSONRenderer())
        )
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger(__name__).debug(
        "Logging system initialized",
        log_level=logging.getLevelName(level),
        log_file=log_file or None,
    )
