"""
Logging for the configuration store.

Console logging through ContextAwareLogger, which keeps ``extra`` attributes
on the record and also renders them pipe-delimited in the message so they
survive any formatter a host process installs.
"""

import logging
import sys
from typing import Optional, Union

from ..config import get_config

_configured_logger: Optional["ContextAwareLogger"] = None


class ContextAwareLogger:
    """Logger wrapper that formats extra attributes in message while preserving them."""

    def __init__(self, logger: logging.Logger):
        """Initialize with an existing logger."""
        self.logger = logger

    def _log_with_formatted_extra(self, level, msg, **kwargs):
        """
        Log with extra data formatted into the message.

        Args:
            level: Logging level method to use
            msg: Log message
            **kwargs: Additional arguments including 'extra' and 'exc_info'
        """
        extra = kwargs.pop("extra", {}) or {}

        if extra:
            extra_str = " | ".join([f"{k}={v}" for k, v in extra.items()])
            full_msg = f"{msg} | {extra_str}"
        else:
            full_msg = msg

        # LogRecord reserves some attribute names; prefix them instead of failing
        safe_extra = {
            (f"ctx_{k}" if k in _RESERVED_RECORD_ATTRS else k): v for k, v in extra.items()
        }

        log_method = getattr(self.logger, level)
        log_method(full_msg, extra=safe_extra, **kwargs)

    def set_level(self, level):
        """Set the logging level of the underlying logger."""
        self.logger.setLevel(level)

    def info(self, msg, **kwargs):
        self._log_with_formatted_extra("info", msg, **kwargs)

    def error(self, msg, **kwargs):
        self._log_with_formatted_extra("error", msg, **kwargs)

    def warning(self, msg, **kwargs):
        self._log_with_formatted_extra("warning", msg, **kwargs)

    def debug(self, msg, **kwargs):
        self._log_with_formatted_extra("debug", msg, **kwargs)

    def exception(self, msg, **kwargs):
        self._log_with_formatted_extra("exception", msg, **kwargs)


_RESERVED_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys() | {"message", "asctime"}
)


class ActorContextFilter(logging.Filter):
    """Logging filter that stamps the authenticated actor onto log records."""

    def filter(self, record):
        """
        Add actor and token_id to the record if a request context is active.

        Args:
            record: LogRecord to modify

        Returns:
            True to include the record in the log output
        """
        # Lazy import to avoid circular dependency
        from ..context.request_context import RequestContext

        auth = RequestContext.get_current_auth()
        record.actor = RequestContext.get_current_actor()
        if auth is not None:
            record.token_id = auth.identifier

        return True


def _to_level(log_level: Union[int, str]) -> int:
    if isinstance(log_level, str):
        return getattr(logging, log_level.upper(), logging.INFO)
    return log_level


def configure_logging(
    name: str = "config_store",
    log_level: Optional[Union[int, str]] = None,
) -> ContextAwareLogger:
    """
    Configure console logging for a process hosting the store.

    Args:
        name: Logger name
        log_level: Logging level (default: from config.logging.level)

    Returns:
        The configured logger wrapped with ContextAwareLogger
    """
    global _configured_logger

    app_config = get_config()
    level = _to_level(log_level if log_level is not None else app_config.logging.level)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(app_config.logging.format))
    console_handler.addFilter(ActorContextFilter())
    logger.addHandler(console_handler)

    wrapped_logger = ContextAwareLogger(logger)
    wrapped_logger.info(
        "Logger configured",
        extra={"logger_name": name, "log_level": logging.getLevelName(level)},
    )
    _configured_logger = wrapped_logger
    return wrapped_logger


def reset_logging() -> None:
    """Forget the configured logger so get_logger() falls back to the root logger."""
    global _configured_logger
    _configured_logger = None


def get_logger(log_level: Optional[Union[int, str]] = None) -> ContextAwareLogger:
    """
    Get the configured logger.

    Args:
        log_level: Optional log level to set on the fallback root logger

    Returns:
        Logger instance
    """
    if _configured_logger is not None:
        return _configured_logger

    logger = logging.getLogger()

    if log_level is None:
        log_level = get_config().logging.level

    logger.setLevel(_to_level(log_level))
    return ContextAwareLogger(logger)
