"""Base repository class for database operations.

Provides common functionality for all repository classes including
connection management and async execution patterns.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
from contextlib import asynccontextmanager
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Generic, Iterable, Optional, TypeVar

T = TypeVar("T")

# Seconds to wait on a locked database before giving up.
BUSY_TIMEOUT = 30.0


class StorageError(Exception):
    """Raised when the underlying database cannot serve a read."""

    pass


def to_db_timestamp(value: date | datetime | None, end_of_day: bool = False) -> Optional[str]:
    """Serialize a date or datetime the way the import pipeline stores it.

    Aware datetimes are converted to naive UTC. A plain date becomes midnight,
    or the last second of the day when end_of_day is set, so that inclusive
    upper bounds cover the whole day.
    """
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.max if end_of_day else time.min)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(sep="T", timespec="seconds")


def parse_db_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp, tolerating blanks and the 'Z' suffix."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _casefold(value: Any) -> Optional[str]:
    return value.casefold() if isinstance(value, str) else None


def id_list_param(ids: Iterable[Any]) -> str:
    """Encode ids as one JSON array parameter for json_each().

    Keeps batch lookups to a single bound parameter regardless of the
    number of ids.
    """
    return json.dumps(list(ids))


class BaseRepository(Generic[T]):
    """Base repository with common database operations.

    Provides:
    - Connection management
    - Async execution via run_in_executor
    - Read transactions spanning several statements

    Every sqlite3 error surfaces as StorageError.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize repository with database path.

        Args:
            db_path: Path to SQLite database file.
        """
        self.db_path = Path(db_path).expanduser()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            timeout=BUSY_TIMEOUT,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        # SQLite's LOWER() only folds ASCII
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[sqlite3.Connection]:
        """Context manager for database connections.

        Yields:
            SQLite connection with row factory set to sqlite3.Row.
        """
        loop = asyncio.get_event_loop()
        try:
            conn = await loop.run_in_executor(None, self._connect)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e

        try:
            yield conn
        finally:
            await loop.run_in_executor(None, conn.close)

    async def _run(self, operation: Callable[[sqlite3.Connection], T]) -> T:
        """Run a synchronous read against a fresh connection.

        Args:
            operation: Function that takes the connection and returns a result.

        Returns:
            Result from operation.

        Raises:
            StorageError: If SQLite reports any error.
        """
        async with self._connection() as conn:
            loop = asyncio.get_event_loop()

            def _run():
                try:
                    return operation(conn)
                except sqlite3.Error as e:
                    raise StorageError(str(e)) from e

            return await loop.run_in_executor(None, _run)

    async def _query(self, query: str, params: tuple | list = ()) -> list[sqlite3.Row]:
        """Execute a SELECT and return all rows."""
        return await self._run(lambda conn: conn.execute(query, params).fetchall())

    async def _query_one(self, query: str, params: tuple | list = ()) -> Optional[sqlite3.Row]:
        """Execute a SELECT and return the first row or None."""
        return await self._run(lambda conn: conn.execute(query, params).fetchone())

    async def _read_snapshot(self, operations: Callable[[sqlite3.Connection], T]) -> T:
        """Run several reads inside one read transaction.

        All statements see the same database snapshot, so a count and the
        page it describes cannot drift apart under concurrent imports.

        Args:
            operations: Function that takes connection and performs reads.

        Returns:
            Result from operations function.
        """
        def _snapshot(conn: sqlite3.Connection) -> T:
            conn.execute("BEGIN")
            try:
                return operations(conn)
            finally:
                conn.rollback()

        return await self._run(_snapshot)
