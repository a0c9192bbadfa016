"""Creative repository for read access to scraped creatives.

This module provides the creative-level lookups used by the group query
layer: batch gets, cluster-id scans per filter family, date-range
aggregates, keyset member listing and page name counts.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from .base import BaseRepository, id_list_param, parse_db_timestamp, to_db_timestamp
from ..models import UNCLUSTERED, CreativeRecord, DateRange, MediaType

# Clustered creatives only: the sentinel and NULL never name a group.
_CLUSTERED = "c.cluster_id IS NOT NULL AND c.cluster_id != ?"


@dataclass(frozen=True)
class ClusterAggregate:
    """Aggregate over all creatives of one cluster."""

    count: int
    content_types: tuple[str, ...]
    first_seen: Optional[datetime]
    last_seen: Optional[datetime]


class CreativeRepository(BaseRepository[CreativeRecord]):
    """Repository for creative database reads."""

    async def get(self, tenant_id: str, external_id: str) -> Optional[CreativeRecord]:
        """Get a creative by external ID within a tenant.

        Args:
            tenant_id: Owning business.
            external_id: Ad library identifier.

        Returns:
            CreativeRecord or None if not found.
        """
        row = await self._query_one(
            "SELECT * FROM creatives c WHERE c.tenant_id = ? AND c.external_id = ?",
            (tenant_id, external_id),
        )
        return self._row_to_creative(row) if row else None

    async def get_many(self, tenant_id: str, external_ids: list[str]) -> dict[str, CreativeRecord]:
        """Batch get creatives keyed by external ID.

        One round trip regardless of how many ids are requested.
        """
        if not external_ids:
            return {}

        rows = await self._query(
            """
            SELECT c.* FROM creatives c
            WHERE c.tenant_id = ?
              AND c.external_id IN (SELECT value FROM json_each(?))
            """,
            (tenant_id, id_list_param(external_ids)),
        )
        return {row["external_id"]: self._row_to_creative(row) for row in rows}

    async def cluster_ids_by_page_name(self, tenant_id: str, page_name: str) -> frozenset[int]:
        """Clusters with at least one creative from the given page."""
        return await self._cluster_ids(tenant_id, "c.page_name = ?", [page_name])

    async def cluster_ids_by_media_type(self, tenant_id: str, media_type: MediaType) -> frozenset[int]:
        """Clusters with at least one creative of the given media type."""
        return await self._cluster_ids(tenant_id, "c.media_type = ?", [media_type.value])

    async def cluster_ids_by_display_window(
        self,
        tenant_id: str,
        start: Optional[date | datetime],
        end: Optional[date | datetime],
    ) -> frozenset[int]:
        """Clusters with a creative displayed inside the given window.

        A creative matches when it started on or after start and ended on or
        before end. Either bound may be omitted.
        """
        conditions = []
        params: list[Any] = []
        if start is not None:
            conditions.append("datetime(c.start_date) >= datetime(?)")
            params.append(to_db_timestamp(start))
        if end is not None:
            conditions.append("datetime(c.end_date) <= datetime(?)")
            params.append(to_db_timestamp(end, end_of_day=True))
        if not conditions:
            raise ValueError("display window needs at least one bound")
        return await self._cluster_ids(tenant_id, " AND ".join(conditions), params)

    async def _cluster_ids(self, tenant_id: str, condition: str, params: list[Any]) -> frozenset[int]:
        rows = await self._query(
            f"""
            SELECT DISTINCT c.cluster_id FROM creatives c
            WHERE c.tenant_id = ? AND {_CLUSTERED} AND {condition}
            """,
            [tenant_id, UNCLUSTERED, *params],
        )
        return frozenset(row["cluster_id"] for row in rows)

    async def date_ranges(self, tenant_id: str, cluster_ids: list[int]) -> dict[int, DateRange]:
        """Earliest start and latest end per cluster, in one aggregate query."""
        if not cluster_ids:
            return {}

        rows = await self._query(
            """
            SELECT c.cluster_id,
                   MIN(datetime(c.start_date)) AS first_seen,
                   MAX(datetime(c.end_date)) AS last_seen
            FROM creatives c
            WHERE c.tenant_id = ?
              AND c.cluster_id IN (SELECT value FROM json_each(?))
            GROUP BY c.cluster_id
            """,
            (tenant_id, id_list_param(cluster_ids)),
        )
        return {
            row["cluster_id"]: DateRange(
                first_seen=parse_db_timestamp(row["first_seen"]),
                last_seen=parse_db_timestamp(row["last_seen"]),
            )
            for row in rows
        }

    async def cluster_aggregate(self, tenant_id: str, cluster_id: int) -> Optional[ClusterAggregate]:
        """Count, media types and date span of one cluster.

        Returns:
            ClusterAggregate or None when the cluster has no creatives.
        """
        def _aggregate(conn: sqlite3.Connection) -> Optional[ClusterAggregate]:
            summary = conn.execute(
                """
                SELECT COUNT(*) AS total,
                       MIN(datetime(c.start_date)) AS first_seen,
                       MAX(datetime(c.end_date)) AS last_seen
                FROM creatives c
                WHERE c.tenant_id = ? AND c.cluster_id = ?
                """,
                (tenant_id, cluster_id),
            ).fetchone()
            if not summary or not summary["total"]:
                return None

            types = conn.execute(
                """
                SELECT DISTINCT c.media_type FROM creatives c
                WHERE c.tenant_id = ? AND c.cluster_id = ?
                ORDER BY c.media_type
                """,
                (tenant_id, cluster_id),
            ).fetchall()

            return ClusterAggregate(
                count=summary["total"],
                content_types=tuple(row["media_type"] for row in types),
                first_seen=parse_db_timestamp(summary["first_seen"]),
                last_seen=parse_db_timestamp(summary["last_seen"]),
            )

        return await self._read_snapshot(_aggregate)

    async def list_members(
        self,
        tenant_id: str,
        cluster_id: int,
        after: Optional[str] = None,
        limit: int = 60,
        exclude_id: Optional[str] = None,
    ) -> list[CreativeRecord]:
        """List creatives of one cluster ordered by external ID.

        Args:
            tenant_id: Owning business.
            cluster_id: Vector group to list.
            after: Keyset cursor; only ids strictly greater are returned.
            limit: Maximum rows to return.
            exclude_id: Creative to leave out (usually the one on screen).

        Returns:
            List of CreativeRecord objects.
        """
        conditions = ["c.tenant_id = ?", "c.cluster_id = ?"]
        params: list[Any] = [tenant_id, cluster_id]

        if after:
            conditions.append("c.external_id > ?")
            params.append(after)
        if exclude_id:
            conditions.append("c.external_id != ?")
            params.append(exclude_id)

        params.append(limit)
        rows = await self._query(
            f"""
            SELECT c.* FROM creatives c
            WHERE {" AND ".join(conditions)}
            ORDER BY c.external_id ASC
            LIMIT ?
            """,
            params,
        )
        return [self._row_to_creative(row) for row in rows]

    async def page_name_counts(self, tenant_id: str) -> list[tuple[str, int]]:
        """Distinct page names with the number of groups that carry them."""
        rows = await self._query(
            f"""
            SELECT TRIM(c.page_name) AS name, COUNT(DISTINCT c.cluster_id) AS groups
            FROM creatives c
            WHERE c.tenant_id = ? AND {_CLUSTERED}
              AND c.page_name IS NOT NULL AND TRIM(c.page_name) != ''
            GROUP BY TRIM(c.page_name)
            ORDER BY groups DESC, name ASC
            """,
            (tenant_id, UNCLUSTERED),
        )
        return [(row["name"], row["groups"]) for row in rows]

    def _row_to_creative(self, row: sqlite3.Row) -> CreativeRecord:
        """Convert a database row to a CreativeRecord."""
        row_dict = dict(row)

        # Unknown media types from older imports are shown as images
        try:
            media_type = MediaType((row_dict.get("media_type") or "IMAGE").upper())
        except ValueError:
            media_type = MediaType.IMAGE

        return CreativeRecord(
            external_id=row_dict["external_id"],
            tenant_id=row_dict["tenant_id"],
            page_name=row_dict.get("page_name"),
            media_type=media_type,
            title=row_dict.get("title"),
            body=row_dict.get("body"),
            caption=row_dict.get("caption"),
            cards_json=row_dict.get("cards_json"),
            start_date=parse_db_timestamp(row_dict.get("start_date")),
            end_date=parse_db_timestamp(row_dict.get("end_date")),
            cluster_id=row_dict.get("cluster_id"),
            media_ref=row_dict.get("media_ref"),
        )
