"""
Structured logging setup.

All modules log through structlog on top of the standard library logging
module, so the host application keeps control of handlers and levels.
Importing the package only routes events into the "splitledger" stdlib
logger; nothing is printed until the host (or the CLI) configures handlers.
"""
import logging
import sys
from typing import Optional

import structlog

from .config import get_settings


def _configure_structlog(renderer) -> None:
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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Install a stderr handler and pick the renderer. Called by the CLI only.

    Args:
        level: Log level name (default: from settings)
        json_output: Render JSON lines instead of console text (default: from settings)
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_output is None:
        json_output = settings.log_json

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
    )
    logging.getLogger("splitledger").setLevel(getattr(logging, level, logging.INFO))

    _configure_structlog(
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )


def get_logger(name: str):
    """Return a bound logger; does not touch handlers or levels."""
    return structlog.get_logger(name)


logging.getLogger("splitledger").addHandler(logging.NullHandler())
_configure_structlog(structlog.processors.JSONRenderer())
