"""Member count bounds across a tenant's groups."""

from __future__ import annotations

from storage import GroupStore

from .views import GroupStats


class StatsAggregator:
    """Computes the duplicate range bounds for filter controls."""

    def __init__(self, store: GroupStore) -> None:
        self.store = store

    async def get_stats(self, tenant_id: str) -> GroupStats:
        """Min and max member count over surfaced groups; {0, 0} when none."""
        minimum, maximum = await self.store.groups.member_count_bounds(tenant_id)
        if minimum is None or maximum is None:
            return GroupStats(min=0, max=0)
        return GroupStats(min=minimum, max=maximum)
