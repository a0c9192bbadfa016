"""SQLite storage backend for group browsing.

This module provides the GroupStore facade which owns the database path,
bootstraps the schema and hands out the specialized repositories.

Example:
    >>> from storage import GroupStore
    >>>
    >>> store = GroupStore(db_path="~/.groupbrowser/groupbrowser.db")
    >>> await store.initialize()
    >>>
    >>> group = await store.groups.get("tenant-1", 42)
    >>> members = await store.creatives.list_members("tenant-1", 42, limit=20)
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path

from .repositories import (
    CreativeRepository,
    GroupRepository,
    StatusRepository,
    StorageError,
    TenantRepository,
)
from .schema import SCHEMA

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "~/.groupbrowser/groupbrowser.db"


class GroupStore:
    """Async SQLite storage for creatives, groups and status snapshots.

    Attributes:
        db_path: Path to the SQLite database file.
        creatives: Creative store reads.
        groups: Group registry reads.
        statuses: Status snapshot reads.
        tenants: Tenant lookups.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path).expanduser()
        self._initialized = False

        self.creatives = CreativeRepository(self.db_path)
        self.groups = GroupRepository(self.db_path)
        self.statuses = StatusRepository(self.db_path)
        self.tenants = TenantRepository(self.db_path)

    async def initialize(self) -> None:
        """Create the database file and tables if they don't exist."""
        if self._initialized:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self._init_schema)
        self._initialized = True
        logger.info(f"Database initialized at {self.db_path}")

    def _init_schema(self) -> None:
        """Synchronously initialize the database schema."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e
        try:
            # WAL lets readers run while the import pipeline writes
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA)
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Schema bootstrap failed: {e}") from e
        finally:
            conn.close()
