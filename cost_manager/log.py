"""
Structured Logging

Every component logs through structlog with event-style messages
(`cost_appended`, `rates_cache_hit`, ...) and keyword context.
Output goes to the stdlib logging backend, never to the user.
"""

import logging
from typing import Optional

import structlog

from cost_manager.config import get_settings


_configured = False


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure structlog and the stdlib root handler.

    Defaults come from AppSettings. Safe to call more than once;
    only the first call takes effect unless `level` or `json_output`
    are given explicitly.
    """
    global _configured
    if _configured and level is None and json_output is None:
        return

    app = get_settings().app
    level = level or app.log_level
    if json_output is None:
        json_output = app.log_json and not app.debug_mode

    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

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
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: Optional[str] = None):
    """Get a bound structlog logger."""
    return structlog.get_logger(name)
