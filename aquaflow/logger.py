"""
Structured Logging

Every module logs through structlog with snake_case event names and
keyword context, e.g.::

    log = get_logger(__name__)
    log.warning("collection_write_failed", key="aquaflow_customers", error=str(e))

Storage write failures and external-service failures are reported here
and nowhere else: callers never see an exception for them.
"""

import logging
import sys
from typing import Optional

import structlog

from aquaflow.config import get_settings


_configured = False


def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Args:
        level: Minimum level name. Defaults to ``RuntimeSettings.log_level``.
        json_output: JSON renderer if True, console renderer otherwise.
            Defaults to ``RuntimeSettings.log_json``.
    """
    global _configured

    runtime = get_settings().runtime
    level = (level or runtime.log_level).upper()
    if json_output is None:
        json_output = runtime.log_json

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
    )

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


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger, configuring structlog on first use."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)
