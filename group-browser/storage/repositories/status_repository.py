"""Status snapshot repository.

Snapshots are written by the scheduled status job; this repository only
batch-reads them for the groups on a page.
"""

from __future__ import annotations

import sqlite3

from .base import BaseRepository, id_list_param, parse_db_timestamp
from ..models import GroupStatusSnapshot


class StatusRepository(BaseRepository[GroupStatusSnapshot]):
    """Repository for group status snapshot reads."""

    async def get_many(self, tenant_id: str, cluster_ids: list[int]) -> dict[int, GroupStatusSnapshot]:
        """Batch get snapshots keyed by cluster ID.

        Groups the job has not visited yet are simply absent from the result.
        """
        if not cluster_ids:
            return {}

        rows = await self._query(
            """
            SELECT * FROM group_status_snapshots s
            WHERE s.tenant_id = ?
              AND s.cluster_id IN (SELECT value FROM json_each(?))
            """,
            (tenant_id, id_list_param(cluster_ids)),
        )
        return {row["cluster_id"]: self._row_to_snapshot(row) for row in rows}

    def _row_to_snapshot(self, row: sqlite3.Row) -> GroupStatusSnapshot:
        """Convert a database row to a GroupStatusSnapshot."""
        return GroupStatusSnapshot(
            cluster_id=row["cluster_id"],
            tenant_id=row["tenant_id"],
            label=row["label"],
            new_count=row["new_count"],
            diff_count=row["diff_count"],
            stale_cycles=row["stale_cycles"],
            previous_snapshot_at=parse_db_timestamp(row["previous_snapshot_at"]),
            updated_at=parse_db_timestamp(row["updated_at"]),
        )
