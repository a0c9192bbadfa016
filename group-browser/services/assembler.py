"""Representative assembly for a page of groups.

Turns an ordered page of cluster ids into group cards: the group row, its
representative creative, the cluster's date span and its lifecycle status.
Each entity type is fetched once for the whole page.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from storage import GroupStore
from storage.models import ClusterGroup, CreativeRecord, DateRange, GroupStatusSnapshot

from .errors import DanglingReference
from .status_classifier import StatusRules, classify
from .views import DEFAULT_DEEP_LINK_TEMPLATE, CreativeSummary, GroupView, deep_link

logger = logging.getLogger(__name__)


class MediaResolver(Protocol):
    """Maps a creative's media reference to a fetchable URL."""

    def resolve_url(self, creative: CreativeRecord) -> Optional[str]:
        ...


class PublicBucketResolver:
    """Resolves media references against a public bucket base URL."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def resolve_url(self, creative: CreativeRecord) -> Optional[str]:
        if not creative.media_ref:
            return None
        return f"{self.base_url}/{creative.media_ref.lstrip('/')}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RepresentativeAssembler:
    """Builds GroupView cards for ordered cluster ids."""

    def __init__(
        self,
        store: GroupStore,
        rules: StatusRules = StatusRules(),
        link_template: str = DEFAULT_DEEP_LINK_TEMPLATE,
        media_resolver: Optional[MediaResolver] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.rules = rules
        self.link_template = link_template
        self.media_resolver = media_resolver
        self._clock = clock

    async def assemble(self, tenant_id: str, cluster_ids: list[int]) -> tuple[GroupView, ...]:
        """Build cards in the order of cluster_ids.

        Groups whose representative is missing, or belongs to another
        cluster, are dropped and logged. Callers keep their original total.
        """
        if not cluster_ids:
            return ()

        groups, representatives, ranges, snapshots = await self._fetch(tenant_id, cluster_ids)
        now = self._clock()

        views = []
        for cluster_id in cluster_ids:
            group = groups.get(cluster_id)
            if group is None:
                logger.warning(f"Group {cluster_id} of tenant {tenant_id} vanished during assembly")
                continue
            try:
                views.append(self._build(group, representatives, ranges, snapshots, now))
            except DanglingReference as e:
                logger.warning(f"Skipping group: {e}")
        return tuple(views)

    async def assemble_one(self, tenant_id: str, cluster_id: int) -> Optional[GroupView]:
        """Build the card for a single group.

        Returns:
            GroupView, or None if the tenant has no surfaced group with that id.

        Raises:
            DanglingReference: The group exists but its representative doesn't.
        """
        groups, representatives, ranges, snapshots = await self._fetch(tenant_id, [cluster_id])
        group = groups.get(cluster_id)
        if group is None or group.member_count < 1:
            return None
        return self._build(group, representatives, ranges, snapshots, self._clock())

    async def _fetch(
        self, tenant_id: str, cluster_ids: list[int]
    ) -> tuple[
        dict[int, ClusterGroup],
        dict[str, CreativeRecord],
        dict[int, DateRange],
        dict[int, GroupStatusSnapshot],
    ]:
        # Representatives hang off the group rows, so they are requested as
        # soon as the group batch lands while ranges and snapshots are in flight.
        async def _groups_and_representatives():
            groups = await self.store.groups.get_many(tenant_id, cluster_ids)
            rep_ids = sorted({g.representative_id for g in groups.values() if g.representative_id})
            representatives = await self.store.creatives.get_many(tenant_id, rep_ids)
            return groups, representatives

        tasks = [
            asyncio.ensure_future(_groups_and_representatives()),
            asyncio.ensure_future(self.store.creatives.date_ranges(tenant_id, cluster_ids)),
            asyncio.ensure_future(self.store.statuses.get_many(tenant_id, cluster_ids)),
        ]
        try:
            (groups, representatives), ranges, snapshots = await asyncio.gather(*tasks)
        except BaseException:
            # Abort the sibling reads on the first failure.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return groups, representatives, ranges, snapshots

    def _build(
        self,
        group: ClusterGroup,
        representatives: dict[str, CreativeRecord],
        ranges: dict[int, DateRange],
        snapshots: dict[int, GroupStatusSnapshot],
        now: datetime,
    ) -> GroupView:
        representative = representatives.get(group.representative_id) if group.representative_id else None
        if representative is None or representative.cluster_id != group.cluster_id:
            raise DanglingReference(group.tenant_id, group.cluster_id, group.representative_id)

        media_url = None
        if self.media_resolver is not None:
            media_url = self.media_resolver.resolve_url(representative)

        span = ranges.get(group.cluster_id, DateRange())
        status = classify(snapshots.get(group.cluster_id), group.created_at, now, self.rules)

        return GroupView(
            cluster_id=group.cluster_id,
            representative=CreativeSummary.from_record(representative, media_url),
            duplicates_count=group.member_count,
            first_seen=span.first_seen,
            last_seen=span.last_seen,
            status=status.status,
            diff_count=status.diff_count,
            description=group.description,
            deep_link=deep_link(representative.external_id, self.link_template),
        )
