"""SQLite-backed activity log.

Design Pattern: Adapter Pattern
SqliteActivityLog adapts a SQLite database to the ActivityLog interface.

Implementation details:
- aiosqlite for async operations
- WAL mode for concurrent reads
- log() and timer().end() stay synchronous: each write is scheduled as a
  background task, tracked until done; flush() waits for all of them
- INTEGER timestamps (milliseconds)
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from pylayoutexport.activity.base import ActivityEvent, ActivityLog, ActivityTiming
from pylayoutexport.core.errors import StorageError

logger = logging.getLogger(__name__)


class SqliteActivityLog(ActivityLog):
    """Durable activity log for audits and reporting.

    After __init__, the instance is not yet usable. Call connect() first.
    This follows asyncio best practices (no async in __init__).

    Usage:
        activity_log = SqliteActivityLog("activity.db")
        await activity_log.connect()
        try:
            controller = ExportController(registry, generator, storage, activity_log)
            ...
            await activity_log.flush()
        finally:
            await activity_log.close()
    """

    def __init__(self, db_path: str):
        """Initialize activity log (connection not opened yet).

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()  # Serialize access to shared connection

        # Track background writes to prevent garbage collection
        self._pending_writes: set[asyncio.Task] = set()

    @classmethod
    async def in_memory(cls) -> SqliteActivityLog:
        """
        Create an in-memory activity log for testing.

        Returns:
            Connected in-memory instance
        """
        instance = cls(":memory:")
        await instance.connect()
        return instance

    def __repr__(self) -> str:
        """Return string representation of activity log instance."""
        if self.db_path == ":memory:":
            return "SqliteActivityLog(in-memory)"
        return f"SqliteActivityLog({self.db_path})"

    async def connect(self) -> None:
        """Open database connection and initialize schema.

        Pattern: Template Method
        Fixed initialization sequence:
        1. Open connection
        2. Enable WAL mode
        3. Create tables
        """
        if self._connection is not None:
            return

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(
            self.db_path,
            timeout=5.0,
            isolation_level=None,  # Autocommit mode
        )

        # In-memory databases answer "memory" and don't support WAL
        cursor = await self._connection.execute("PRAGMA journal_mode=WAL")
        result = await cursor.fetchone()
        await cursor.close()

        if result:
            mode = result[0].upper()
            if mode not in ("WAL", "MEMORY"):
                raise StorageError(f"wal-unavailable:{result[0]}")

        await self._connection.execute("PRAGMA busy_timeout=5000")
        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create tables.

        Schema design:
        - activity_events: one row per log() call
        - activity_timings: one row per ended timer
        """
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS activity_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                category TEXT NOT NULL,
                event_name TEXT NOT NULL,
                detail TEXT,
                created_at INTEGER NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_activity_events_category
            ON activity_events(category, created_at)
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS activity_timings (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                category TEXT NOT NULL,
                event_name TEXT NOT NULL,
                elapsed_ms REAL NOT NULL,
                created_at INTEGER NOT NULL
            )
        """)

    def _check_connected(self) -> None:
        if self._connection is None:
            raise StorageError("not-connected")

    # ========================================================================
    # ActivityLog hooks - schedule writes without blocking the caller
    # ========================================================================

    def _write_event(self, event: ActivityEvent) -> None:
        self._check_connected()
        self._schedule(
            "INSERT INTO activity_events (category, event_name, detail, created_at) "
            "VALUES (?, ?, ?, ?)",
            (event.category, event.event_name, event.detail, _millis(event.timestamp)),
        )

    def _write_timing(self, timing: ActivityTiming) -> None:
        self._check_connected()
        self._schedule(
            "INSERT INTO activity_timings (category, event_name, elapsed_ms, created_at) "
            "VALUES (?, ?, ?, ?)",
            (timing.category, timing.event_name, timing.elapsed_ms, _millis(datetime.now())),
        )

    def _schedule(self, sql: str, params: tuple) -> None:
        task = asyncio.get_running_loop().create_task(self._execute(sql, params))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _execute(self, sql: str, params: tuple) -> None:
        try:
            async with self._lock:
                await self._connection.execute(sql, params)
        except Exception as e:
            logger.warning(f"Activity log write failed: {e!r}")

    # ========================================================================
    # Queries
    # ========================================================================

    async def flush(self) -> None:
        """Wait until every scheduled write has finished."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    async def events(self, category: str | None = None) -> list[ActivityEvent]:
        """Return logged events, oldest first."""
        self._check_connected()
        await self.flush()

        sql = "SELECT category, event_name, detail, created_at FROM activity_events"
        params: tuple = ()
        if category is not None:
            sql += " WHERE category = ?"
            params = (category,)
        sql += " ORDER BY id"

        async with self._lock:
            cursor = await self._connection.execute(sql, params)
            rows = await cursor.fetchall()
            await cursor.close()

        return [
            ActivityEvent(
                category=row[0],
                event_name=row[1],
                detail=row[2],
                timestamp=datetime.fromtimestamp(row[3] / 1000),
            )
            for row in rows
        ]

    async def timings(self) -> list[ActivityTiming]:
        """Return recorded timings, oldest first."""
        self._check_connected()
        await self.flush()

        async with self._lock:
            cursor = await self._connection.execute(
                "SELECT category, event_name, elapsed_ms FROM activity_timings ORDER BY id"
            )
            rows = await cursor.fetchall()
            await cursor.close()

        return [ActivityTiming(category=row[0], event_name=row[1], elapsed_ms=row[2]) for row in rows]

    async def close(self) -> None:
        """Flush pending writes and close the connection.

        Explicit resource cleanup, not relying on GC.
        """
        if self._connection is not None:
            await self.flush()
            await self._connection.close()
            self._connection = None


def _millis(timestamp: datetime) -> int:
    return int(timestamp.timestamp() * 1000)
