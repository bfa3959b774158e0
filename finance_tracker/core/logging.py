"""
Structured logging setup.

The process builds one logger in ``create_app`` and keeps it on
``app.state.logger``. Components never look a logger up on their own: they
receive it through ``get_logger`` and bind their own context on top.
"""

import logging
import sys

import structlog
from fastapi import Request


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
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


def build_logger(name: str = "finance_tracker") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def get_logger(request: Request) -> structlog.stdlib.BoundLogger:
    """FastAPI dependency returning the application's logger."""
    return request.app.state.logger
