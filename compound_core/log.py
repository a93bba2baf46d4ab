from __future__ import annotations

import logging
import os
from typing import Optional

import structlog

LOG_LEVEL_ENV = "COMPOUND_LOG_LEVEL"


def configure_logging(level: Optional[str] = None, json_output: bool = False) -> None:
    """
    Route structlog through stdlib logging. Level falls back to $COMPOUND_LOG_LEVEL, then WARNING.
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name, logging.WARNING), force=True)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
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
