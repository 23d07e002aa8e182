"""
Structured Logging

DESIGN DECISION: The engine logs through structlog with JSON output, so
every write, import, export and sync attempt leaves a machine-readable
line. Logging never changes engine state and never raises into callers.
"""

import logging
from typing import Optional

import structlog

from archifinance.config import get_settings


_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure structlog and the stdlib root handler once per process.
    
    Safe to call repeatedly; later calls only adjust the level.
    """
    global _configured
    level_name = level or get_settings().app.log_level
    logging.basicConfig(format="%(message)s", level=level_name)
    logging.getLogger().setLevel(level_name)
    
    if _configured:
        return
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """A structlog logger, configuring logging on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
