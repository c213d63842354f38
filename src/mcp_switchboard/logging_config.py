"""
structlog setup shared by applications embedding the client.
"""
import logging as py_logging

import structlog

from .config import LoggingConfig


def configure_logging(logging_config: LoggingConfig) -> None:
    handlers: list[py_logging.Handler] | None = None
    if logging_config.file:
        handlers = [py_logging.FileHandler(logging_config.file)]

    py_logging.basicConfig(
        level=getattr(py_logging, logging_config.level.upper(), py_logging.INFO),
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=False) if logging_config.format.lower() == "console"
            else structlog.processors.JSONRenderer(sort_keys=True)
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.get_logger(__name__).info("Logging configured.", logging_level=logging_config.level, logging_format=logging_config.format)
