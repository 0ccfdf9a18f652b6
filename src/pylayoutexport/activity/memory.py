"""In-memory activity log for testing.

Instance is immediately usable after __init__.
"""

from pylayoutexport.activity.base import ActivityEvent, ActivityLog, ActivityTiming


class InMemoryActivityLog(ActivityLog):
    """Keeps every event and timing in lists.

    Usage:
        activity_log = InMemoryActivityLog()
        ...
        assert activity_log.event_names() == ["PDF Export started", ...]
    """

    def __init__(self):
        self.events: list[ActivityEvent] = []
        self.timings: list[ActivityTiming] = []

    def __repr__(self) -> str:
        return "InMemoryActivityLog"

    def _write_event(self, event: ActivityEvent) -> None:
        self.events.append(event)

    def _write_timing(self, timing: ActivityTiming) -> None:
        self.timings.append(timing)

    def event_names(self) -> list[str]:
        """Names of logged events, in order."""
        return [event.event_name for event in self.events]

    def timing_names(self) -> list[str]:
        """Names of ended timers, in order."""
        return [timing.event_name for timing in self.timings]

    def reset(self) -> None:
        self.events.clear()
        self.timings.clear()
