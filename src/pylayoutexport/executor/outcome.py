"""
Export workflow outcomes.

This module defines the WorkflowOutcome union returned by every export job:
exactly one of Success or Failure is produced per start_export() call.

**Python Documentation**:
- Dataclasses: https://docs.python.org/3/library/dataclasses.html
- Union types: https://docs.python.org/3/library/typing.html#typing.Union

**Design Pattern**: State Machine using Union types

Failures are values, not exceptions: callers inspect the outcome instead
of wrapping the await in try/except. Failure.raise_error() is available
for callers that prefer exceptions.

Example:
    ```python
    outcome = await controller.start_export("pdf", properties)

    match outcome:
        case Success(result, file_id):
            print(f"Export ready: {result['output-url']}")
        case Failure(reason, file_id):
            print(f"Export {file_id} failed: {reason}")
    ```
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pylayoutexport.core.errors import ExportError
from pylayoutexport.core.status import FailureKind

__all__ = [
    "Success",
    "Failure",
    "WorkflowOutcome",
    "is_success",
    "is_failure",
]


@dataclass(frozen=True)
class Success:
    """
    Export finished and the result is available.

    Attributes:
        result: Result object; always contains "output-url", plus keys added
            by the result processor and decorators
        file_id: Upload identifier of the export

    **Python Best Practice**: Using frozen dataclass for immutability
    Reference: https://docs.python.org/3/library/dataclasses.html#frozen-instances
    """

    result: Mapping[str, Any]
    file_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "result", MappingProxyType(dict(self.result)))

    @property
    def output_url(self) -> str:
        """Signed URL of the exported document."""
        return self.result["output-url"]

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"Success(file_id={self.file_id!r}, output_url={self.result.get('output-url')!r})"


@dataclass(frozen=True)
class Failure:
    """
    Export failed.

    Attributes:
        reason: Reason code ("empty", "generation-error", "polling-timeout", ...)
        file_id: Upload identifier, None if the failure happened before the
            configuration was obtained
        kind: Workflow stage that failed
        error: Original exception, if the failure came from one

    Example:
        ```python
        if outcome.is_failure():
            report(outcome.reason, outcome.file_id)
        ```
    """

    reason: str
    file_id: str | None = None
    kind: FailureKind = FailureKind.GENERATION
    error: BaseException | None = field(default=None, compare=False, repr=False)

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def raise_error(self) -> None:
        """
        Raise the failure as an exception.

        Re-raises the original exception when there is one, otherwise an
        ExportError carrying the reason and file id.
        """
        if self.error is not None:
            raise self.error
        raise ExportError(self.reason, self.file_id)

    def __str__(self) -> str:
        return f"Failure(reason={self.reason!r}, file_id={self.file_id!r}, kind={self.kind})"


# WorkflowOutcome is a Union type representing the result of an export.
#
# Pattern matching (Python 3.10+):
#     match outcome:
#         case Success(result, file_id):
#             publish(result)
#         case Failure(reason, file_id):
#             report(reason, file_id)
#
WorkflowOutcome = Success | Failure


# =============================================================================
# TYPE GUARDS FOR WORKFLOW OUTCOME
# =============================================================================


def is_success(outcome: WorkflowOutcome) -> bool:
    """
    Type guard to check if outcome is Success.

    Args:
        outcome: Export outcome

    Returns:
        True if outcome is Success, False if Failure
    """
    return isinstance(outcome, Success)


def is_failure(outcome: WorkflowOutcome) -> bool:
    """
    Type guard to check if outcome is Failure.

    Args:
        outcome: Export outcome

    Returns:
        True if outcome is Failure, False if Success
    """
    return isinstance(outcome, Failure)
