"""Pagination over the candidate cluster set."""

from __future__ import annotations

from dataclasses import dataclass

from storage import GroupStore

from .filters import CandidateSet, SortKey

DEFAULT_PAGE_SIZE = 24
MAX_PAGE_SIZE = 500


@dataclass(frozen=True)
class PageRequest:
    """Clamped page number and size."""

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def clamp(
        cls,
        page: int | None,
        page_size: int | None,
        default_size: int = DEFAULT_PAGE_SIZE,
        max_size: int = MAX_PAGE_SIZE,
    ) -> "PageRequest":
        """Force page >= 1 and page_size into [1, max_size]."""
        page = 1 if page is None else max(1, int(page))
        size = default_size if page_size is None else int(page_size)
        return cls(page=page, page_size=min(max(1, size), max_size))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class PageSlice:
    """Ordered cluster ids for one page and the total candidate count."""

    cluster_ids: tuple[int, ...]
    total: int


class PaginationEngine:
    """Orders candidate groups and cuts out one page."""

    def __init__(self, store: GroupStore) -> None:
        self.store = store

    async def page(
        self,
        tenant_id: str,
        candidates: CandidateSet,
        sort: SortKey,
        request: PageRequest,
    ) -> PageSlice:
        """Return the page of cluster ids and the total.

        An empty candidate set answers without touching the store. Count and
        slice are read from the same snapshot.
        """
        if candidates is not None and not candidates:
            return PageSlice(cluster_ids=(), total=0)

        ids, total = await self.store.groups.page(
            tenant_id,
            candidates,
            sort.value,
            offset=request.offset,
            limit=request.page_size,
        )
        return PageSlice(cluster_ids=tuple(ids), total=total)
