"""
Logging utilities
"""

import logging
from typing import Any, Optional

import structlog

from ..config import config


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure stdlib logging and structlog from config (or explicit overrides)"""
    level = (level or config.logging.level).upper()
    log_format = log_format or config.logging.log_format

    logging.basicConfig(format="%(message)s", level=getattr(logging, level))

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if log_format == "json" else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = None, **context: Any) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, optionally bound to extra context such as airport_id"""
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger
