"""Group query service.

Entry point for every read the browsing client makes. A listing runs as:

    cache lookup -> tenant check -> filter resolution -> pagination
    -> representative assembly (with status classification) -> cache write

Example:
    >>> store = GroupStore("~/.groupbrowser/groupbrowser.db")
    >>> await store.initialize()
    >>> service = GroupQueryService(store, QueryCache(ttl_seconds=120))
    >>>
    >>> filters = GroupFilters.build(media_type="VIDEO", min_duplicates=5)
    >>> page = await service.list_groups("tenant-1", filters, page=1, page_size=24)
    >>> for view in page.items:
    ...     print(view.cluster_id, view.duplicates_count, view.status.value)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Optional

from config import AppConfig
from storage import GroupStore, StorageError
from storage.models import UNCLUSTERED

from .assembler import MediaResolver, PublicBucketResolver, RepresentativeAssembler, utc_now
from .errors import Cancelled, InvalidFilter, TenantNotFound, UpstreamUnavailable
from .filter_resolver import FilterResolver
from .filters import GroupFilters, SortKey
from .pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PageRequest, PaginationEngine
from .query_cache import QueryCache, fingerprint
from .stats import StatsAggregator
from .status_classifier import StatusRules
from .views import (
    DEFAULT_DEEP_LINK_TEMPLATE,
    CreativeDetail,
    GroupMetadata,
    GroupPage,
    GroupStats,
    GroupView,
    MemberPage,
    MemberView,
    PageNameCount,
)

logger = logging.getLogger(__name__)

DEFAULT_MEMBER_LIMIT = 60
MAX_MEMBER_LIMIT = 500

SECONDS_PER_DAY = 86400


class GroupQueryService:
    """Read-only query layer over clustered creatives.

    Attributes:
        store: Storage backend.
        cache: Short-TTL result cache shared across requests.
        default_page_size: Page size used when the caller gives none.
        max_page_size: Upper clamp for page sizes.
        default_timeout: Deadline in seconds applied when a call gives none.
    """

    def __init__(
        self,
        store: GroupStore,
        cache: Optional[QueryCache] = None,
        rules: StatusRules = StatusRules(),
        link_template: str = DEFAULT_DEEP_LINK_TEMPLATE,
        media_resolver: Optional[MediaResolver] = None,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
        default_member_limit: int = DEFAULT_MEMBER_LIMIT,
        default_timeout: Optional[float] = None,
        clock=utc_now,
    ) -> None:
        self.store = store
        self.cache = cache if cache is not None else QueryCache()
        self.link_template = link_template
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size
        self.default_member_limit = default_member_limit
        self.default_timeout = default_timeout

        self.resolver = FilterResolver(store)
        self.pagination = PaginationEngine(store)
        self.assembler = RepresentativeAssembler(
            store,
            rules=rules,
            link_template=link_template,
            media_resolver=media_resolver,
            clock=clock,
        )
        self.stats = StatsAggregator(store)

    async def list_groups(
        self,
        tenant_id: str,
        filters: Optional[GroupFilters] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        sort: Any = None,
        timeout: Optional[float] = None,
    ) -> GroupPage:
        """List one page of groups matching the filters.

        Args:
            tenant_id: Business scope.
            filters: Predicate families; None lists every surfaced group.
            page: 1-based page number, clamped to >= 1.
            page_size: Clamped to [1, max_page_size].
            sort: SortKey or its string value; defaults to duplicates_desc.
            timeout: Deadline in seconds for the whole call.

        Returns:
            GroupPage. The total counts every matching group, including any
            later dropped from items for a dangling representative.

        Raises:
            InvalidFilter: Malformed filters or sort key.
            TenantNotFound: Unknown tenant.
            UpstreamUnavailable: Storage failure.
            Cancelled: Deadline exceeded.
        """
        filters = filters or GroupFilters()
        filters.validate()
        sort_key = SortKey.parse(sort)
        request = PageRequest.clamp(page, page_size, self.default_page_size, self.max_page_size)

        key = fingerprint(
            "list_groups",
            tenant_id,
            filters=filters.fingerprint_fields(),
            page=request.page,
            page_size=request.page_size,
            sort=sort_key.value,
        )
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for list_groups tenant={tenant_id} page={request.page}")
            return cached

        started = time.perf_counter()
        result = await self._run(self._list_groups(tenant_id, filters, sort_key, request), timeout)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            f"list_groups tenant={tenant_id} page={request.page} returned "
            f"{len(result.items)}/{result.total} in {elapsed_ms:.1f}ms"
        )

        self.cache.put(key, result)
        return result

    async def _list_groups(
        self,
        tenant_id: str,
        filters: GroupFilters,
        sort_key: SortKey,
        request: PageRequest,
    ) -> GroupPage:
        await self._require_tenant(tenant_id)
        candidates = await self.resolver.resolve(tenant_id, filters)
        page_slice = await self.pagination.page(tenant_id, candidates, sort_key, request)
        items = await self.assembler.assemble(tenant_id, list(page_slice.cluster_ids))
        return GroupPage(
            items=items,
            total=page_slice.total,
            page=request.page,
            page_size=request.page_size,
        )

    async def get_stats(self, tenant_id: str, timeout: Optional[float] = None) -> GroupStats:
        """Min and max duplicates count across the tenant's groups."""
        key = fingerprint("get_stats", tenant_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        async def _stats() -> GroupStats:
            await self._require_tenant(tenant_id)
            return await self.stats.get_stats(tenant_id)

        result = await self._run(_stats(), timeout)
        self.cache.put(key, result)
        return result

    async def list_page_names(
        self, tenant_id: str, timeout: Optional[float] = None
    ) -> tuple[PageNameCount, ...]:
        """Page names with group counts, for the page name filter dropdown."""
        key = fingerprint("list_page_names", tenant_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        async def _page_names() -> tuple[PageNameCount, ...]:
            await self._require_tenant(tenant_id)
            counts = await self.store.creatives.page_name_counts(tenant_id)
            return tuple(PageNameCount(name=name, count=count) for name, count in counts)

        result = await self._run(_page_names(), timeout)
        self.cache.put(key, result)
        return result

    async def get_group_metadata(
        self,
        cluster_id: int,
        tenant_id: str,
        timeout: Optional[float] = None,
    ) -> Optional[GroupMetadata]:
        """Live aggregate over one group's creatives.

        Returns:
            GroupMetadata, or None when the cluster has no creatives.
        """
        self._check_cluster_id(cluster_id)

        async def _metadata() -> Optional[GroupMetadata]:
            await self._require_tenant(tenant_id)
            aggregate = await self.store.creatives.cluster_aggregate(tenant_id, cluster_id)
            if aggregate is None:
                return None

            active_days = 0
            if aggregate.first_seen and aggregate.last_seen:
                span = aggregate.last_seen - aggregate.first_seen
                active_days = round(span.total_seconds() / SECONDS_PER_DAY)

            return GroupMetadata(
                count=aggregate.count,
                content_types=aggregate.content_types,
                first_seen=aggregate.first_seen,
                last_seen=aggregate.last_seen,
                active_period_days=active_days,
            )

        return await self._run(_metadata(), timeout)

    async def list_group_members(
        self,
        cluster_id: int,
        tenant_id: str,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
        exclude_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> MemberPage:
        """Forward-only keyset page of a group's creatives.

        Args:
            cluster_id: Group to list.
            tenant_id: Business scope.
            cursor: next_cursor from the previous page, None for the first.
            limit: Page length, clamped to [1, 500].
            exclude_id: Creative to leave out of the listing.
            timeout: Deadline in seconds.
        """
        self._check_cluster_id(cluster_id)
        limit = self.default_member_limit if limit is None else int(limit)
        limit = min(max(1, limit), MAX_MEMBER_LIMIT)

        async def _members() -> MemberPage:
            await self._require_tenant(tenant_id)
            rows = await self.store.creatives.list_members(
                tenant_id,
                cluster_id,
                after=cursor,
                limit=limit + 1,
                exclude_id=exclude_id,
            )
            has_more = len(rows) > limit
            rows = rows[:limit]
            return MemberPage(
                items=tuple(MemberView.from_record(r, self.link_template) for r in rows),
                next_cursor=rows[-1].external_id if has_more else None,
                has_more=has_more,
            )

        return await self._run(_members(), timeout)

    async def get_group_representative(
        self,
        cluster_id: int,
        tenant_id: str,
        timeout: Optional[float] = None,
    ) -> Optional[GroupView]:
        """Card for a single group.

        Raises:
            DanglingReference: The group's representative is missing.
        """
        self._check_cluster_id(cluster_id)

        async def _representative() -> Optional[GroupView]:
            await self._require_tenant(tenant_id)
            return await self.assembler.assemble_one(tenant_id, cluster_id)

        return await self._run(_representative(), timeout)

    async def get_creative(
        self,
        external_id: str,
        tenant_id: str,
        timeout: Optional[float] = None,
    ) -> Optional[CreativeDetail]:
        """One creative with its group's duplicates count (0 when unclustered)."""

        async def _creative() -> Optional[CreativeDetail]:
            await self._require_tenant(tenant_id)
            creative = await self.store.creatives.get(tenant_id, external_id)
            if creative is None:
                return None

            duplicates = 0
            if creative.is_clustered:
                group = await self.store.groups.get(tenant_id, creative.cluster_id)
                duplicates = group.member_count if group else 0

            return CreativeDetail(
                creative=MemberView.from_record(creative, self.link_template),
                duplicates_count=duplicates,
            )

        return await self._run(_creative(), timeout)

    async def _require_tenant(self, tenant_id: str) -> None:
        if await self.store.tenants.get(tenant_id) is None:
            raise TenantNotFound(tenant_id)

    def _check_cluster_id(self, cluster_id: int) -> None:
        if cluster_id == UNCLUSTERED:
            raise InvalidFilter(f"Cluster id {UNCLUSTERED} does not name a group", field="cluster_id")

    @classmethod
    def from_config(cls, config: AppConfig, store: Optional[GroupStore] = None) -> "GroupQueryService":
        """Wire a service, its cache and its store from application config."""
        store = store or GroupStore(config.database.path)
        media_resolver = None
        if config.links.media_base_url:
            media_resolver = PublicBucketResolver(config.links.media_base_url)

        return cls(
            store,
            cache=QueryCache(
                ttl_seconds=config.cache.ttl_seconds,
                max_entries=config.cache.max_entries,
            ),
            rules=StatusRules(
                new_window_days=config.status.new_window_days,
                inactive_cycles=config.status.inactive_cycles,
            ),
            link_template=config.links.deep_link_template,
            media_resolver=media_resolver,
            default_page_size=config.query.default_page_size,
            max_page_size=config.query.max_page_size,
            default_member_limit=config.query.default_member_limit,
            default_timeout=config.query.timeout_seconds,
        )

    async def _run(self, operation: Awaitable, timeout: Optional[float]) -> Any:
        """Await operation under the deadline, translating storage failures.

        Executor threads already running a query finish in the background;
        their results are discarded.
        """
        timeout = self.default_timeout if timeout is None else timeout
        try:
            if timeout is None:
                return await operation
            return await asyncio.wait_for(operation, timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Query exceeded its {timeout}s deadline")
            raise Cancelled(f"Query exceeded its {timeout}s deadline") from e
        except StorageError as e:
            logger.error(f"Storage failure: {e}")
            raise UpstreamUnavailable(str(e)) from e
