"""Filter resolution: predicate families to cluster-id sets.

Each active family is resolved to the set of qualifying cluster ids. Group
level families are cheap single-table reads and run first; creative level
families follow. The first family that matches nothing ends resolution.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from storage import GroupStore

from .filters import CandidateSet, GroupFilters, intersect_all

logger = logging.getLogger(__name__)

FamilyLookup = Callable[[], Awaitable[frozenset]]


class FilterResolver:
    """Resolves GroupFilters against the store for one tenant."""

    def __init__(self, store: GroupStore) -> None:
        self.store = store

    def families(self, tenant_id: str, filters: GroupFilters) -> list[tuple[str, FamilyLookup]]:
        """Lookups for the active predicate families, in evaluation order.

        Inactive families are left out entirely; a default duplicate range
        is inactive because every surfaced group already satisfies it.
        """
        groups = self.store.groups
        creatives = self.store.creatives
        active: list[tuple[str, FamilyLookup]] = []

        duplicates = filters.duplicates
        if duplicates is not None and not duplicates.is_default:
            active.append((
                "duplicates",
                lambda: groups.ids_by_member_count(tenant_id, duplicates.min, duplicates.max),
            ))
        if filters.description:
            active.append((
                "description",
                lambda: groups.ids_by_description(tenant_id, filters.description),
            ))
        if filters.page_name:
            active.append((
                "page_name",
                lambda: creatives.cluster_ids_by_page_name(tenant_id, filters.page_name),
            ))
        if filters.media_type is not None:
            active.append((
                "media_type",
                lambda: creatives.cluster_ids_by_media_type(tenant_id, filters.media_type),
            ))
        if filters.has_display_window:
            active.append((
                "display_window",
                lambda: creatives.cluster_ids_by_display_window(
                    tenant_id, filters.start_date, filters.end_date
                ),
            ))
        return active

    async def resolve(self, tenant_id: str, filters: GroupFilters) -> CandidateSet:
        """Resolve and intersect all active families.

        Returns:
            None when no family is active, otherwise the intersected set
            (empty as soon as any family, or the running intersection,
            comes back empty).
        """
        candidates: CandidateSet = None
        for name, lookup in self.families(tenant_id, filters):
            ids = await lookup()
            candidates = intersect_all([candidates, ids])
            logger.debug(f"Filter {name} matched {len(ids)} groups, {len(candidates)} remain")
            if not candidates:
                logger.debug(f"Filter {name} emptied the candidate set for tenant {tenant_id}")
                return frozenset()
        return candidates
