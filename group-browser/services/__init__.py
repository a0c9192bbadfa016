"""Services package for group query logic."""

from services.assembler import MediaResolver, PublicBucketResolver, RepresentativeAssembler
from services.errors import (
    Cancelled,
    DanglingReference,
    GroupQueryError,
    InvalidFilter,
    TenantNotFound,
    UpstreamUnavailable,
)
from services.filters import DuplicateRangeFilter, GroupFilters, SortKey, intersect_all
from services.group_query import GroupQueryService
from services.query_cache import QueryCache, fingerprint
from services.status_classifier import GroupStatus, StatusRules, classify
from services.views import (
    CreativeDetail,
    CreativeSummary,
    GroupMetadata,
    GroupPage,
    GroupStats,
    GroupView,
    MemberPage,
    MemberView,
    PageNameCount,
)

__all__ = [
    "GroupQueryService",
    "QueryCache",
    "fingerprint",
    "GroupFilters",
    "DuplicateRangeFilter",
    "SortKey",
    "intersect_all",
    "GroupStatus",
    "StatusRules",
    "classify",
    "MediaResolver",
    "PublicBucketResolver",
    "RepresentativeAssembler",
    "GroupQueryError",
    "InvalidFilter",
    "TenantNotFound",
    "UpstreamUnavailable",
    "DanglingReference",
    "Cancelled",
    "CreativeDetail",
    "CreativeSummary",
    "GroupMetadata",
    "GroupPage",
    "GroupStats",
    "GroupView",
    "MemberPage",
    "MemberView",
    "PageNameCount",
]
