"""
Error types for the export workflow.

Every failure that reaches a caller carries a short machine readable
``reason`` code ("empty", "generation-error", "polling-timeout", ...).
Collaborators may raise any exception; reason_of() turns it into the
reason code recorded on the Failure outcome.

From Dave Cheney: "Errors are values"
Custom exceptions with context, not generic Exception.
"""

from __future__ import annotations

__all__ = [
    "ExportError",
    "EmptyContentError",
    "ConfigurationError",
    "UploadError",
    "GenerationError",
    "PollTimeoutError",
    "PollStoppedError",
    "PostProcessError",
    "StorageError",
    "UnknownFormatError",
    "reason_of",
]


class ExportError(Exception):
    """
    Base class for export workflow errors.

    Attributes:
        reason: Reason code surfaced to the caller on failure
        file_id: Upload identifier, if known when the error was raised

    Example:
        ```python
        raise ExportError("network-error")
        ```
    """

    default_reason = "export-error"

    def __init__(self, reason: str | None = None, file_id: str | None = None):
        self.reason = reason or self.default_reason
        self.file_id = file_id
        super().__init__(self.reason)

    def __repr__(self) -> str:
        if self.file_id is None:
            return f"{type(self).__name__}({self.reason!r})"
        return f"{type(self).__name__}({self.reason!r}, file_id={self.file_id!r})"


class EmptyContentError(ExportError):
    """Exporter produced no content to upload."""

    default_reason = "empty"


class ConfigurationError(ExportError):
    """Configuration generator could not issue an export configuration."""

    default_reason = "configuration-error"


class UploadError(ExportError):
    """Storage transport rejected the upload."""

    default_reason = "network-error"


class GenerationError(ExportError):
    """Conversion service reported a failure for the uploaded file."""

    default_reason = "generation-error"


class PostProcessError(ExportError):
    """Result processor could not produce the final result."""

    default_reason = "post-process-error"


class StorageError(ExportError):
    """
    Storage transport failed.

    Raised by storage adapters for connection problems and unexpected
    responses while checking a polling endpoint.
    """

    default_reason = "network-error"


class PollTimeoutError(StorageError):
    """Nothing appeared at the polled endpoint before the poll timeout."""

    default_reason = "polling-timeout"


class PollStoppedError(StorageError):
    """Poll was stopped by its semaphore before anything appeared."""

    default_reason = "polling-stopped"


class UnknownFormatError(ExportError, KeyError):
    """
    No exporter registered for the requested format.

    Subclasses KeyError so lookups behave like a mapping miss.
    """

    default_reason = "unknown-format"

    def __init__(self, format: str):
        self.format = format
        super().__init__(self.default_reason)

    def __str__(self) -> str:
        return f"No exporter registered for format {self.format!r}"


def reason_of(error: BaseException) -> str:
    """
    Extract the reason code from an exception raised by a collaborator.

    Args:
        error: Exception raised anywhere in the workflow

    Returns:
        ExportError.reason, else the exception message, else its class name

    Example:
        ```python
        reason_of(UploadError("file-too-large"))  # "file-too-large"
        reason_of(ValueError("boom"))             # "boom"
        reason_of(TimeoutError())                 # "TimeoutError"
        ```
    """
    if isinstance(error, ExportError):
        return error.reason
    message = str(error)
    return message if message else type(error).__name__
