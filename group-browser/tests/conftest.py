"""Shared fixtures for Group Browser tests.

Rows are written with plain sqlite3, the way the import pipeline and the
status job populate the database; the code under test only reads them.
"""

import sqlite3
import tempfile
from pathlib import Path
from typing import Optional

import pytest
import pytest_asyncio

from storage import GroupStore


class Seeder:
    """Writes fixture rows straight into a test database."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def _execute(self, sql: str, rows: list[tuple]) -> None:
        conn = sqlite3.connect(self.db_path)
        try:
            conn.executemany(sql, rows)
            conn.commit()
        finally:
            conn.close()

    def tenant(self, tenant_id: str = "acme", name: Optional[str] = None) -> None:
        self._execute(
            "INSERT INTO tenants (id, slug, name) VALUES (?, ?, ?)",
            [(tenant_id, tenant_id, name or tenant_id.title())],
        )

    def creative(
        self,
        external_id: str,
        tenant_id: str = "acme",
        cluster_id: Optional[int] = None,
        page_name: Optional[str] = "Acme Page",
        media_type: str = "IMAGE",
        title: Optional[str] = None,
        body: Optional[str] = None,
        caption: Optional[str] = None,
        cards_json: Optional[str] = None,
        start_date: Optional[str] = "2024-03-01T00:00:00",
        end_date: Optional[str] = "2024-03-10T00:00:00",
        media_ref: Optional[str] = None,
    ) -> None:
        self._execute(
            """
            INSERT INTO creatives (
                external_id, tenant_id, page_name, title, body, caption, cards_json,
                media_type, start_date, end_date, cluster_id, media_ref
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [(
                external_id, tenant_id, page_name, title, body, caption, cards_json,
                media_type, start_date, end_date, cluster_id, media_ref,
            )],
        )

    def group(
        self,
        cluster_id: int,
        tenant_id: str = "acme",
        member_count: int = 1,
        representative_id: Optional[str] = None,
        description: Optional[str] = None,
        created_at: str = "2024-01-01T00:00:00",
    ) -> None:
        self._execute(
            """
            INSERT INTO cluster_groups (
                tenant_id, cluster_id, member_count, representative_id,
                description, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [(tenant_id, cluster_id, member_count, representative_id,
              description, created_at, created_at)],
        )

    def snapshot(
        self,
        cluster_id: int,
        tenant_id: str = "acme",
        label: Optional[str] = None,
        new_count: Optional[int] = None,
        diff_count: Optional[int] = None,
        stale_cycles: Optional[int] = None,
        previous_snapshot_at: Optional[str] = None,
    ) -> None:
        self._execute(
            """
            INSERT INTO group_status_snapshots (
                tenant_id, cluster_id, label, new_count, diff_count,
                stale_cycles, previous_snapshot_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [(tenant_id, cluster_id, label, new_count, diff_count,
              stale_cycles, previous_snapshot_at, "2024-03-15T00:00:00")],
        )

    def cluster(
        self,
        cluster_id: int,
        size: int,
        tenant_id: str = "acme",
        media_type: str = "IMAGE",
        page_name: str = "Acme Page",
        description: Optional[str] = None,
        created_at: str = "2024-01-01T00:00:00",
        start_date: str = "2024-03-01T00:00:00",
        end_date: str = "2024-03-10T00:00:00",
    ) -> list[str]:
        """Insert a group with size members; the first member represents it."""
        ids = [f"{tenant_id}-{cluster_id}-{i:03d}" for i in range(size)]
        for external_id in ids:
            self.creative(
                external_id,
                tenant_id=tenant_id,
                cluster_id=cluster_id,
                page_name=page_name,
                media_type=media_type,
                title=f"Ad {external_id}",
                start_date=start_date,
                end_date=end_date,
            )
        self.group(
            cluster_id,
            tenant_id=tenant_id,
            member_count=size,
            representative_id=ids[0],
            description=description,
            created_at=created_at,
        )
        return ids


@pytest_asyncio.fixture
async def temp_store():
    """Create a temporary GroupStore for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        store = GroupStore(db_path=str(db_path))
        await store.initialize()
        yield store


@pytest.fixture
def seeder(temp_store):
    """Seeder bound to the temporary store's database, with tenant 'acme'."""
    seeder = Seeder(temp_store.db_path)
    seeder.tenant("acme")
    return seeder
