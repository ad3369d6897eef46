"""Utility modules for configuration, logging, and error handling."""

from .config import Config
from .errors import ErrorType, ErrorContext, RationaleTrackerError

__all__ = [
    'Config',
    'ErrorType',
    'ErrorContext',
    'RationaleTrackerError'
]
