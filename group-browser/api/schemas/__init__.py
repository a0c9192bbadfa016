"""API Schema models for Group Browser."""

from .common import (
    ErrorDetail,
    PaginationMeta,
)

from .groups import (
    CreativeDetailResponse,
    CreativeSummaryResponse,
    GroupMetadataResponse,
    GroupStatsResponse,
    GroupViewResponse,
    MemberPageResponse,
    MemberResponse,
    PageNameResponse,
    PaginatedGroupsResponse,
)

__all__ = [
    "ErrorDetail",
    "PaginationMeta",
    "CreativeDetailResponse",
    "CreativeSummaryResponse",
    "GroupMetadataResponse",
    "GroupStatsResponse",
    "GroupViewResponse",
    "MemberPageResponse",
    "MemberResponse",
    "PageNameResponse",
    "PaginatedGroupsResponse",
]
