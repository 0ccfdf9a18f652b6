"""
Polling cadence configuration for the dual poller.

Design Pattern: Strategy Pattern
PollPolicy encapsulates how often each endpoint is checked, allowing
different cadences without modifying the controller.

Design Rationale:
- Output list is checked often: users wait on it
- Error list is checked rarely: failures are uncommon
- How long to keep polling belongs to the storage adapter (poll_timeout)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, cast


@dataclass(frozen=True)
class PollPolicy:
    """
    Sleep periods between checks of the two polled endpoints.

    Examples:
        # Named policy: production cadence
        policy = PollPolicy.STANDARD

        # Custom policy
        policy = PollPolicy.with_periods(error_ms=1000, output_ms=100)
    """

    error_sleep_period_ms: int
    """Milliseconds between checks of the error list URL.

    Default: 15000 (15 seconds)
    """

    output_sleep_period_ms: int
    """Milliseconds between checks of the output list URL.

    Default: 2500 (2.5 seconds)
    """

    # =========================================================================
    # Predefined Policies
    # =========================================================================

    if TYPE_CHECKING:
        STANDARD: PollPolicy
        FAST: PollPolicy
    else:
        STANDARD = cast("PollPolicy", None)
        FAST = cast("PollPolicy", None)

    def __post_init__(self) -> None:
        if self.error_sleep_period_ms < 0 or self.output_sleep_period_ms < 0:
            raise ValueError("poll sleep periods must be non-negative")

    @classmethod
    def with_periods(cls, error_ms: int, output_ms: int) -> PollPolicy:
        """
        Create a policy with custom sleep periods.

        Args:
            error_ms: Milliseconds between error list checks
            output_ms: Milliseconds between output list checks

        Returns:
            PollPolicy with the given periods
        """
        return cls(error_sleep_period_ms=error_ms, output_sleep_period_ms=output_ms)

    def __repr__(self) -> str:
        return (
            f"PollPolicy(error_sleep_period_ms={self.error_sleep_period_ms}, "
            f"output_sleep_period_ms={self.output_sleep_period_ms})"
        )


# Initialize predefined policies after class definition
PollPolicy.STANDARD = PollPolicy(
    error_sleep_period_ms=15000,  # 15 seconds
    output_sleep_period_ms=2500,  # 2.5 seconds
)

PollPolicy.FAST = PollPolicy(
    error_sleep_period_ms=50,
    output_sleep_period_ms=10,
)
