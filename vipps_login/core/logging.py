"""Logging setup for the Vipps login client.

The library itself only creates module loggers. Applications (and the
CLI) call configure_logging() once to install a handler that:

- prefixes every line with the current login attempt's correlation id
- demotes httpx/httpcore INFO request lines to DEBUG
"""

import contextvars
import logging
from collections.abc import Generator
from contextlib import contextmanager

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

NOISY_HTTP_LOGGERS = (
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
)

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "vipps_login_correlation_id", default=None
)


def parse_log_level(value: str | None) -> str:
    """Normalize a LOG_LEVEL value, falling back to INFO.

    Only the first word is used so values like "DEBUG  # verbose" work.
    """
    if not value or not value.split():
        return "INFO"
    level = value.split()[0].upper()
    return level if level in VALID_LEVELS else "INFO"


def set_noisy_http_logger_levels(current_log_level: str) -> None:
    """Ensure HTTP client noise only surfaces at DEBUG level."""

    noisy_level = logging.DEBUG if current_log_level == "DEBUG" else logging.WARNING
    for logger_name in NOISY_HTTP_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


@contextmanager
def attempt_context(correlation_id: str) -> Generator[None, None, None]:
    """Tag log records emitted inside the block with a login attempt id.

    Uses a context variable, so concurrent attempts on other threads or
    tasks keep their own id.
    """
    token = _correlation_id.set(correlation_id)
    try:
        yield
    finally:
        _correlation_id.reset(token)


def current_correlation_id() -> str | None:
    return _correlation_id.get()


class CorrelationIdFilter(logging.Filter):
    """Copy the active correlation id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = _correlation_id.get()
        if correlation_id is not None and not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id
        return True


class CorrelationFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            return f"[{correlation_id[:8]}] {formatted}"
        return formatted


class HttpRequestLogDowngradeFilter(logging.Filter):
    """Downgrade noisy third-party HTTP logs to DEBUG."""

    def __init__(self, *prefixes: str) -> None:
        super().__init__()
        self.prefixes = prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.INFO:
            for prefix in self.prefixes:
                if record.name.startswith(prefix):
                    record.levelno = logging.DEBUG
                    record.levelname = logging.getLevelName(logging.DEBUG)
                    break
        return True


def build_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    handler.addFilter(HttpRequestLogDowngradeFilter(*NOISY_HTTP_LOGGERS))
    handler.setFormatter(
        CorrelationFormatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s", datefmt="%H:%M:%S")
    )
    return handler


def configure_logging(level: str | None = None) -> str:
    """Install the package handler on the root logger.

    Args:
        level: Log level name (e.g. from LOG_LEVEL); invalid values mean INFO

    Returns:
        The effective level name
    """
    log_level = parse_log_level(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(build_handler())
    root_logger.setLevel(getattr(logging, log_level))

    set_noisy_http_logger_levels(log_level)
    return log_level


__all__ = [
    "NOISY_HTTP_LOGGERS",
    "CorrelationFormatter",
    "CorrelationIdFilter",
    "HttpRequestLogDowngradeFilter",
    "attempt_context",
    "configure_logging",
    "current_correlation_id",
    "parse_log_level",
    "set_noisy_http_logger_levels",
]
