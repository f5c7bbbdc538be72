"""
Logging configuration using structlog.

JSON lines by default, a console renderer for local development
(LOG_JSON=0). The standard library logging module is the sink so uvicorn
and authlib records end up in the same stream.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import Processor

from wr25_auth import config


def configure_logging(log_level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure structlog and stdlib logging; arguments override LOG_LEVEL / LOG_JSON."""
    level = (log_level or config.log_level()).upper()
    use_json = config.log_json() if json_output is None else json_output

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level, logging.INFO),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
