"""Group repository for the cluster group registry.

All group reads go through the same base predicate: the group belongs to
the tenant, is not the unclustered sentinel, and has at least one member.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

from .base import BaseRepository, id_list_param, parse_db_timestamp
from ..models import UNCLUSTERED, ClusterGroup

_SURFACED = "g.tenant_id = ? AND g.cluster_id != ? AND g.member_count >= 1"

# Sort columns keyed by order name. cluster_id is always the tie-break.
ORDERINGS = {
    "duplicates_desc": "g.member_count DESC, g.cluster_id ASC",
    "newest": "datetime(g.created_at) DESC, g.cluster_id ASC",
    "oldest": "datetime(g.created_at) ASC, g.cluster_id ASC",
}


class GroupRepository(BaseRepository[ClusterGroup]):
    """Repository for cluster group reads."""

    async def get(self, tenant_id: str, cluster_id: int) -> Optional[ClusterGroup]:
        """Get one group by cluster ID.

        Returns:
            ClusterGroup or None if the tenant has no such group.
        """
        row = await self._query_one(
            "SELECT * FROM cluster_groups g WHERE g.tenant_id = ? AND g.cluster_id = ?",
            (tenant_id, cluster_id),
        )
        return self._row_to_group(row) if row else None

    async def get_many(self, tenant_id: str, cluster_ids: list[int]) -> dict[int, ClusterGroup]:
        """Batch get groups keyed by cluster ID."""
        if not cluster_ids:
            return {}

        rows = await self._query(
            """
            SELECT * FROM cluster_groups g
            WHERE g.tenant_id = ?
              AND g.cluster_id IN (SELECT value FROM json_each(?))
            """,
            (tenant_id, id_list_param(cluster_ids)),
        )
        return {row["cluster_id"]: self._row_to_group(row) for row in rows}

    async def ids_by_member_count(
        self,
        tenant_id: str,
        minimum: int,
        maximum: Optional[int] = None,
    ) -> frozenset[int]:
        """Clusters whose denormalized member count lies in [minimum, maximum]."""
        conditions = [_SURFACED, "g.member_count >= ?"]
        params: list[Any] = [tenant_id, UNCLUSTERED, minimum]
        if maximum is not None:
            conditions.append("g.member_count <= ?")
            params.append(maximum)

        rows = await self._query(
            f"SELECT g.cluster_id FROM cluster_groups g WHERE {' AND '.join(conditions)}",
            params,
        )
        return frozenset(row["cluster_id"] for row in rows)

    async def ids_by_description(self, tenant_id: str, text: str) -> frozenset[int]:
        """Clusters whose description contains text, ignoring case."""
        rows = await self._query(
            f"""
            SELECT g.cluster_id FROM cluster_groups g
            WHERE {_SURFACED}
              AND instr(casefold(g.description), ?) > 0
            """,
            (tenant_id, UNCLUSTERED, text.casefold()),
        )
        return frozenset(row["cluster_id"] for row in rows)

    async def page(
        self,
        tenant_id: str,
        candidates: Optional[frozenset[int]],
        ordering: str,
        offset: int,
        limit: int,
    ) -> tuple[list[int], int]:
        """Ordered slice of cluster IDs plus the total, from one snapshot.

        Args:
            tenant_id: Owning business.
            candidates: Restrict to these clusters, or None for all.
            ordering: Key of ORDERINGS.
            offset: Rows to skip.
            limit: Rows to return.

        Returns:
            Tuple of (cluster ids for the page, total matching groups).
        """
        order_by = ORDERINGS[ordering]
        conditions = [_SURFACED]
        params: list[Any] = [tenant_id, UNCLUSTERED]
        if candidates is not None:
            conditions.append("g.cluster_id IN (SELECT value FROM json_each(?))")
            params.append(id_list_param(sorted(candidates)))
        where_clause = " AND ".join(conditions)

        def _page(conn: sqlite3.Connection) -> tuple[list[int], int]:
            total = conn.execute(
                f"SELECT COUNT(*) FROM cluster_groups g WHERE {where_clause}",
                params,
            ).fetchone()[0]
            if offset >= total:
                return [], total

            rows = conn.execute(
                f"""
                SELECT g.cluster_id FROM cluster_groups g
                WHERE {where_clause}
                ORDER BY {order_by}
                LIMIT ? OFFSET ?
                """,
                [*params, limit, offset],
            ).fetchall()
            return [row["cluster_id"] for row in rows], total

        return await self._read_snapshot(_page)

    async def member_count_bounds(self, tenant_id: str) -> tuple[Optional[int], Optional[int]]:
        """Minimum and maximum member count across the tenant's groups."""
        row = await self._query_one(
            f"""
            SELECT MIN(g.member_count) AS min_count, MAX(g.member_count) AS max_count
            FROM cluster_groups g
            WHERE {_SURFACED}
            """,
            (tenant_id, UNCLUSTERED),
        )
        if not row:
            return None, None
        return row["min_count"], row["max_count"]

    def _row_to_group(self, row: sqlite3.Row) -> ClusterGroup:
        """Convert a database row to a ClusterGroup."""
        return ClusterGroup(
            cluster_id=row["cluster_id"],
            tenant_id=row["tenant_id"],
            member_count=row["member_count"] or 0,
            representative_id=row["representative_id"],
            description=row["description"],
            created_at=parse_db_timestamp(row["created_at"]),
            updated_at=parse_db_timestamp(row["updated_at"]),
        )
