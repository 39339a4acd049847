# Standard library imports
from collections.abc import MutableMapping
from functools import lru_cache
import logging
import sys
from typing import Any

# Local application imports
from civic_issues.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CustomFormatter(logging.Formatter):
    """
    Console formatter, coloured by level when writing to a terminal.
    """

    # ANSI color codes
    GREY = "\x1b[38;20m"
    YELLOW = "\x1b[33;20m"
    RED = "\x1b[31;20m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"

    COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREY,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def __init__(self, use_color: bool = True):
        super().__init__(LOG_FORMAT)
        self.use_color = use_color
        self._formatters = {
            level: logging.Formatter(f"{color}{LOG_FORMAT}{self.RESET}") for level, color in self.COLORS.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        formatter = self._formatters.get(record.levelno) if self.use_color else None
        if formatter is None:
            return super().format(record)
        return formatter.format(record)


def default_level() -> int:
    if settings.LOG_LEVEL:
        return logging.getLevelName(settings.LOG_LEVEL)
    return logging.DEBUG if settings.DEBUG_MODE else logging.INFO


@lru_cache
def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Get a logger with a console handler, created once per name.

    Errors are also forwarded to Sentry in production by the logging
    integration set up in core/monitoring/sentry.py.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    level = default_level() if level is None else level
    logger.setLevel(level)
    # Own handler per logger; keep records off the root handler
    logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(CustomFormatter(use_color=sys.stdout.isatty()))
    logger.addHandler(console_handler)

    return logger


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Appends its context to every message as ``[key=value ...]``."""

    def __init__(self, logger: logging.Logger, extra: dict[str, Any] | None = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        if self.extra:
            context = " ".join(f"{key}={value}" for key, value in self.extra.items())
            msg = f"{msg} [{context}]"
        return msg, kwargs

    def bind(self, **context: Any) -> "LoggerAdapter":
        """A new adapter with this adapter's context plus the given keys."""
        return LoggerAdapter(self.logger, {**self.extra, **context})


def get_contextual_logger(name: str, **context: Any) -> LoggerAdapter:
    return LoggerAdapter(get_logger(name), context)
