"""Logging for the marketplace domain.

Records always go to stdout. Rotating files (``marketplace.log`` plus an
errors-only ``marketplace_error.log``) are written only when ``LOG_DIR``
names a directory, so importing the domain never touches the filesystem.
structlog renders key/value events on top of the standard library handlers.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_QUIET_LOGGERS = ("protean", "httpx", "asyncio")

_MAX_LOG_BYTES = 10 * 1024 * 1024


def _environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` if set, otherwise the environment's default level."""
    return os.getenv("LOG_LEVEL", _LEVELS.get(_environment(), "INFO"))


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def build_handlers(level: str, log_dir: str | None = None) -> list[logging.Handler]:
    """Handlers for the root logger: stdout, plus log files under ``log_dir``."""
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers: list[logging.Handler] = [console]

    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_file(directory / "marketplace.log", level))
        handlers.append(_rotating_file(directory / "marketplace_error.log", logging.ERROR))

    return handlers


def setup_stdlib_logging() -> None:
    level = get_log_level()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = build_handlers(level, os.getenv("LOG_DIR"))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_structlog() -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if _environment() in ("production", "staging")
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
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
            structlog.contextvars.merge_contextvars,
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            ),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    setup_stdlib_logging()
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Bind request-scoped values (path, customer) onto every later log line."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
