"""Group browsing schema models."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from .common import PaginationMeta


class CreativeSummaryResponse(BaseModel):
    """Representative creative shown on a group card."""
    external_id: str
    title: str
    page_name: Optional[str] = None
    media_type: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    media_ref: Optional[str] = None
    media_url: Optional[str] = None


class GroupViewResponse(BaseModel):
    """Response model for one group card."""
    cluster_id: int
    representative: CreativeSummaryResponse
    duplicates_count: int
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    status: str  # New, Scaling, Inactive or Stable
    diff_count: int = 0
    description: Optional[str] = None
    deep_link: str


class PaginatedGroupsResponse(BaseModel):
    """Paginated response for the group listing."""
    data: list[GroupViewResponse]
    meta: PaginationMeta


class GroupStatsResponse(BaseModel):
    """Duplicates count bounds for range filter controls."""
    min: int
    max: int


class GroupMetadataResponse(BaseModel):
    """Live aggregate over one group."""
    count: int
    content_types: list[str]
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None
    active_period_days: int


class MemberResponse(BaseModel):
    """One creative in a group drill-down."""
    external_id: str
    title: str
    page_name: Optional[str] = None
    body: Optional[str] = None
    caption: Optional[str] = None
    media_type: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    cluster_id: Optional[int] = None
    media_ref: Optional[str] = None
    deep_link: str


class MemberPageResponse(BaseModel):
    """Keyset page of group members."""
    data: list[MemberResponse]
    next_cursor: Optional[str] = None
    has_more: bool


class PageNameResponse(BaseModel):
    """Page name option for the filter dropdown."""
    name: str
    count: int


class CreativeDetailResponse(BaseModel):
    """Single creative with its group's duplicates count."""
    creative: MemberResponse
    duplicates_count: int
