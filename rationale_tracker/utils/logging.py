"""
Logging setup for the rationale tracker.

Cockpit context (loan id, component, extraction request id) lives in a
ContextVar, so a background extraction and a concurrent request handler
each see their own fields. ContextFilter copies the fields onto every
record, with "-" for the ones not set, so format strings can reference
them unconditionally.
"""

import functools
import logging
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Optional

CONTEXT_FIELDS = ("component", "loan_id", "request_id")
MISSING_FIELD = "-"

DEFAULT_LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(component)s loan=%(loan_id)s request=%(request_id)s] %(message)s"
)

_log_context: ContextVar[Dict[str, Any]] = ContextVar("rationale_tracker_log_context", default={})


class ContextFilter(logging.Filter):
    """Attach the current cockpit context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _log_context.get()
        for key in CONTEXT_FIELDS:
            if not hasattr(record, key):
                setattr(record, key, context.get(key, MISSING_FIELD))
        for key, value in context.items():
            if key not in CONTEXT_FIELDS and not hasattr(record, key):
                setattr(record, key, value)
        return True


def setup_logging(
    level: str = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the root logger for the tracker.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format string; may reference component, loan_id and request_id
        log_file: Optional path to a log file; empty disables file output

    Returns:
        Configured root logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(log_format)
    context_filter = ContextFilter()

    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    return root_logger


def set_context(**kwargs):
    """
    Set context fields for subsequent log messages in the current context.

    A value of None removes the field.

    Example:
        set_context(loan_id="CML-2024-00847")
        logger.info("Rationale confirmed")  # record carries loan_id
    """
    context = dict(_log_context.get())
    for key, value in kwargs.items():
        if value is None:
            context.pop(key, None)
        else:
            context[key] = value
    _log_context.set(context)


def clear_context():
    _log_context.set({})


def get_context() -> Dict[str, Any]:
    return dict(_log_context.get())


def with_context(**context_kwargs):
    """
    Decorator that adds context fields for the duration of a call.

    Example:
        @with_context(component="extraction")
        def run_extraction(request_id):
            set_context(request_id=request_id)
            logger.info("Extracting")  # carries component and request_id

    Fields set inside the call, by the decorator or by the function, are
    dropped when it returns or raises.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            token = _log_context.set({**_log_context.get(), **context_kwargs})
            try:
                return func(*args, **kwargs)
            finally:
                _log_context.reset(token)

        return wrapper
    return decorator
