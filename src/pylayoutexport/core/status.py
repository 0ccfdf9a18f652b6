"""
Status enums for export workflow tracking.

Following the principle "Make zero values useful":
the first member of each enum is the initial state.
"""

from enum import Enum


class SignalState(Enum):
    """
    Settlement state of an export job.

    Lifecycle:
    PENDING → RESOLVED | REJECTED

    Design: one-way state machine, settled at most once
    """

    PENDING = "pending"
    """Workflow still running; pollers keep checking."""

    RESOLVED = "resolved"
    """Workflow finished with a result object."""

    REJECTED = "rejected"
    """Workflow finished with a failure reason."""

    @property
    def is_settled(self) -> bool:
        """Check if this state is terminal (pollers must stop)."""
        return self is not SignalState.PENDING

    def __str__(self) -> str:
        return self.value


class FailureKind(Enum):
    """
    Stage of the workflow that produced a failure.

    EMPTY failures happen before any collaborator is contacted and never
    carry a file id. CONFIGURATION failures carry no file id either, every
    later kind does.
    """

    EMPTY = "EMPTY"
    """Exporter produced no content (pre-flight validation)."""

    CONFIGURATION = "CONFIGURATION"
    """Configuration generator rejected the request."""

    UPLOAD = "UPLOAD"
    """Storage upload failed."""

    GENERATION = "GENERATION"
    """Conversion service reported an error marker."""

    POLL = "POLL"
    """Output poll timed out or its transport failed."""

    POST_PROCESS = "POST_PROCESS"
    """Registered result processor failed."""

    @property
    def has_file_id(self) -> bool:
        """Check if failures of this kind happen after the file id is known."""
        return self not in (FailureKind.EMPTY, FailureKind.CONFIGURATION)

    def __str__(self) -> str:
        return self.value
