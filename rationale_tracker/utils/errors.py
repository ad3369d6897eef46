"""Error handling utilities for the rationale tracker."""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum


EXTRACTION_FAILED_MESSAGE = "Unable to extract text from this document"
NO_RATIONALES_MESSAGE = "No approval rationales could be identified in this document."
INVALID_FILE_MESSAGE = "Please import a PDF file"
SNAPSHOT_CORRUPTED_MESSAGE = "Previous session data was corrupted. Starting fresh."
STORE_UNAVAILABLE_MESSAGE = "Data will not persist after page refresh"


class ErrorType(Enum):
    """Enumeration of error types in the rationale tracker."""

    # Document input errors
    DOCUMENT_INVALID_FORMAT = "DOCUMENT_INVALID_FORMAT"
    DOCUMENT_UNREADABLE = "DOCUMENT_UNREADABLE"
    DOCUMENT_UNPARSEABLE = "DOCUMENT_UNPARSEABLE"
    DOCUMENT_EMPTY_TEXT = "DOCUMENT_EMPTY_TEXT"

    # Extraction yield errors
    EXTRACTION_NO_RATIONALES = "EXTRACTION_NO_RATIONALES"

    # Persistence errors
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    STORE_WRITE_FAILED = "STORE_WRITE_FAILED"
    SNAPSHOT_CORRUPTED = "SNAPSHOT_CORRUPTED"

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"


@dataclass
class ErrorContext:
    """
    Context information for errors in the rationale tracker.

    Attributes:
        error_type: Type of error from ErrorType enum
        message: Neutral, user-facing error message
        recoverable: Whether the session can carry on
        fallback_action: Optional description of fallback action taken
        details: Optional additional error details
        original_exception: Optional original exception that caused this error
    """

    error_type: ErrorType
    message: str
    recoverable: bool
    fallback_action: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    original_exception: Optional[Exception] = None


class RationaleTrackerError(Exception):
    """
    Base exception for all rationale tracker errors.

    Wraps failures with an ErrorContext so callers can degrade gracefully
    and show the message to the user.

    Attributes:
        context: ErrorContext with detailed error information
    """

    def __init__(self, context: ErrorContext):
        self.context = context
        super().__init__(context.message)

    @property
    def error_type(self) -> ErrorType:
        return self.context.error_type

    @property
    def user_message(self) -> str:
        return self.context.message

    def __str__(self) -> str:
        base = f"{self.context.error_type.value}: {self.context.message}"
        if self.context.fallback_action:
            base += f" (Fallback: {self.context.fallback_action})"
        return base


class DocumentProcessingError(RationaleTrackerError):
    """Exception for uploaded files rejected before extraction starts."""

    @classmethod
    def invalid_format(
        cls,
        filename: str,
        message: str = INVALID_FILE_MESSAGE,
    ) -> "DocumentProcessingError":
        """
        Create error for a file that is not a PDF.

        Args:
            filename: Name of the uploaded file
            message: User-facing message

        Returns:
            DocumentProcessingError instance
        """
        context = ErrorContext(
            error_type=ErrorType.DOCUMENT_INVALID_FORMAT,
            message=message,
            recoverable=True,
            fallback_action="Keep current cockpit state",
            details={"filename": filename}
        )
        return cls(context)


class ExtractionError(RationaleTrackerError):
    """Exception for rationale extraction yield failures."""

    @classmethod
    def no_rationales(cls, filename: str) -> "ExtractionError":
        context = ErrorContext(
            error_type=ErrorType.EXTRACTION_NO_RATIONALES,
            message=NO_RATIONALES_MESSAGE,
            recoverable=True,
            fallback_action="Reset cockpit to empty state",
            details={"filename": filename}
        )
        return cls(context)


class PersistenceError(RationaleTrackerError):
    """Exception for key-value store and snapshot errors."""

    @classmethod
    def store_unavailable(
        cls,
        key: str,
        error: Exception,
        operation: str = "read"
    ) -> "PersistenceError":
        """
        Create error for a store that cannot be read or reached.

        Args:
            key: Storage key involved
            error: Original exception
            operation: Store operation that failed

        Returns:
            PersistenceError instance
        """
        context = ErrorContext(
            error_type=ErrorType.STORE_UNAVAILABLE,
            message=STORE_UNAVAILABLE_MESSAGE,
            recoverable=True,
            fallback_action="Continue in memory only",
            details={"key": key, "operation": operation},
            original_exception=error
        )
        return cls(context)

    @classmethod
    def write_failed(cls, key: str, error: Exception) -> "PersistenceError":
        context = ErrorContext(
            error_type=ErrorType.STORE_WRITE_FAILED,
            message=STORE_UNAVAILABLE_MESSAGE,
            recoverable=True,
            fallback_action="Continue in memory only",
            details={"key": key, "operation": "write"},
            original_exception=error
        )
        return cls(context)

    @classmethod
    def snapshot_corrupted(cls, error: Exception) -> "PersistenceError":
        """
        Create error for a stored snapshot that fails validation.

        Args:
            error: Original parsing or validation exception

        Returns:
            PersistenceError instance
        """
        context = ErrorContext(
            error_type=ErrorType.SNAPSHOT_CORRUPTED,
            message=SNAPSHOT_CORRUPTED_MESSAGE,
            recoverable=True,
            fallback_action="Discard stored snapshot and start fresh",
            original_exception=error
        )
        return cls(context)


class ConfigurationError(RationaleTrackerError):
    """Exception for configuration loading errors."""

    @classmethod
    def invalid(cls, config_path: str, error: Exception) -> "ConfigurationError":
        context = ErrorContext(
            error_type=ErrorType.CONFIG_INVALID,
            message=f"Configuration file '{config_path}' is invalid: {str(error)}",
            recoverable=False,
            details={"config_path": config_path},
            original_exception=error
        )
        return cls(context)
