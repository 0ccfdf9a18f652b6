"""Activity logs recording export events and polling durations.

Provides multiple implementations behind a common interface:
    - ActivityLog: Abstract interface (log, timer)
    - LoggingActivityLog: stdlib logging
    - InMemoryActivityLog: In-memory log for testing
    - SqliteActivityLog: SQLite-backed durable log
"""

from pylayoutexport.activity.base import (
    ActivityEvent,
    ActivityLog,
    ActivityTimer,
    ActivityTiming,
)
from pylayoutexport.activity.logger import LoggingActivityLog
from pylayoutexport.activity.memory import InMemoryActivityLog


def __getattr__(name: str):
    """Lazy import the SQLite backend (pulls in aiosqlite)."""
    if name == "SqliteActivityLog":
        from pylayoutexport.activity.sqlite import SqliteActivityLog

        return SqliteActivityLog
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ActivityLog",
    "ActivityTimer",
    "ActivityEvent",
    "ActivityTiming",
    "LoggingActivityLog",
    "InMemoryActivityLog",
    "SqliteActivityLog",
]
