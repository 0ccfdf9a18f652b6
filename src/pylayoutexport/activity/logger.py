"""Activity log backed by the standard logging module."""

import logging

from pylayoutexport.activity.base import ActivityEvent, ActivityLog, ActivityTiming


class LoggingActivityLog(ActivityLog):
    """Writes activity events and timings to a logger.

    Default activity log of ExportController.

    Usage:
        activity_log = LoggingActivityLog()
        activity_log.log("Map", "PDF Export started")
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO):
        self._logger = logger or logging.getLogger("pylayoutexport.activity")
        self._level = level

    def __repr__(self) -> str:
        return f"LoggingActivityLog({self._logger.name})"

    def _write_event(self, event: ActivityEvent) -> None:
        if event.detail is None:
            self._logger.log(self._level, f"[{event.category}] {event.event_name}")
        else:
            self._logger.log(
                self._level, f"[{event.category}] {event.event_name}: {event.detail}"
            )

    def _write_timing(self, timing: ActivityTiming) -> None:
        self._logger.log(
            self._level,
            f"[{timing.category}] {timing.event_name} took {timing.elapsed_ms:.1f}ms",
        )
