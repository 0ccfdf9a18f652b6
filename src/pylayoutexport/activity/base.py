"""
ActivityLog - Abstract interface for business activity logging.

Records what users do with exports ("PDF Export started", "PDF Export
failed") and how long polling took. Activity logging is fire and forget:
implementations must not block and failures must not reach the workflow.

Design Pattern: Adapter Pattern
Backends (stdlib logging, memory, SQLite) adapt to this interface.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)

__all__ = [
    "ActivityLog",
    "ActivityTimer",
    "ActivityEvent",
    "ActivityTiming",
]


@dataclass(frozen=True)
class ActivityEvent:
    """A logged activity event."""

    category: str
    event_name: str
    detail: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class ActivityTiming:
    """Duration recorded by an ActivityTimer."""

    category: str
    event_name: str
    elapsed_ms: float


class ActivityTimer:
    """
    Measures the time from creation to end().

    end() records the duration once; later calls are ignored.

    Example:
        ```python
        timer = activity_log.timer("Map", "PDF Export:polling-completed")
        ...
        timer.end()
        ```
    """

    def __init__(self, category: str, event_name: str, record: Callable[[ActivityTiming], None]):
        self.category = category
        self.event_name = event_name
        self._record = record
        self._started = time.perf_counter()
        self._ended = False

    @property
    def ended(self) -> bool:
        return self._ended

    def end(self) -> None:
        if self._ended:
            return
        self._ended = True
        elapsed_ms = (time.perf_counter() - self._started) * 1000.0
        self._record(ActivityTiming(self.category, self.event_name, elapsed_ms))


class ActivityLog(ABC):
    """
    Abstract activity log.

    Subclasses implement _write_event() and _write_timing(); log() and
    timer() guard them so a failing backend only produces a warning.
    """

    def log(self, category: str, event_name: str, detail: str | None = None) -> None:
        """Record an activity event (fire and forget)."""
        try:
            self._write_event(ActivityEvent(category, event_name, detail))
        except Exception as e:
            logger.warning(f"Activity log failed for {category}/{event_name}: {e!r}")

    def timer(self, category: str, event_name: str) -> ActivityTimer:
        """Start a timer whose end() records the elapsed time."""
        return ActivityTimer(category, event_name, self._record_timing)

    def _record_timing(self, timing: ActivityTiming) -> None:
        try:
            self._write_timing(timing)
        except Exception as e:
            logger.warning(
                f"Activity timer failed for {timing.category}/{timing.event_name}: {e!r}"
            )

    @abstractmethod
    def _write_event(self, event: ActivityEvent) -> None: ...

    @abstractmethod
    def _write_timing(self, timing: ActivityTiming) -> None: ...
