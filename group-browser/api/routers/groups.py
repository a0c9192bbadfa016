"""Groups Router - Vector group browsing endpoints.

Lists groups of near-duplicate creatives with filtering, sorting and
pagination, plus the detail views used when a group is opened.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_service, to_http_exception
from api.schemas import (
    CreativeDetailResponse,
    CreativeSummaryResponse,
    GroupMetadataResponse,
    GroupStatsResponse,
    GroupViewResponse,
    MemberPageResponse,
    MemberResponse,
    PageNameResponse,
    PaginatedGroupsResponse,
    PaginationMeta,
)
from services import GroupFilters, GroupQueryService
from services.errors import GroupQueryError
from services.views import GroupView, MemberView

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Groups"])


# =============================================================================
# Helper Functions
# =============================================================================

def _group_response(view: GroupView) -> GroupViewResponse:
    """Convert a GroupView into its response model."""
    rep = view.representative
    return GroupViewResponse(
        cluster_id=view.cluster_id,
        representative=CreativeSummaryResponse(
            external_id=rep.external_id,
            title=rep.title,
            page_name=rep.page_name,
            media_type=rep.media_type.value,
            start_date=rep.start_date,
            end_date=rep.end_date,
            media_ref=rep.media_ref,
            media_url=rep.media_url,
        ),
        duplicates_count=view.duplicates_count,
        first_seen=view.first_seen,
        last_seen=view.last_seen,
        status=view.status.value,
        diff_count=view.diff_count,
        description=view.description,
        deep_link=view.deep_link,
    )


def _member_response(member: MemberView) -> MemberResponse:
    """Convert a MemberView into its response model."""
    return MemberResponse(
        external_id=member.external_id,
        title=member.title,
        page_name=member.page_name,
        body=member.body,
        caption=member.caption,
        media_type=member.media_type.value,
        start_date=member.start_date,
        end_date=member.end_date,
        cluster_id=member.cluster_id,
        media_ref=member.media_ref,
        deep_link=member.deep_link,
    )


# =============================================================================
# Group Endpoints
# =============================================================================

@router.get("/groups", response_model=PaginatedGroupsResponse)
async def list_groups(
    tenant_id: str = Query(..., description="Business scope"),
    page_name: Optional[str] = Query(None, description="Only groups with a creative from this page"),
    start_date: Optional[date] = Query(None, description="Creatives displayed from this date"),
    end_date: Optional[date] = Query(None, description="Creatives displayed until this date (inclusive)"),
    media_type: Optional[str] = Query(None, description="IMAGE, VIDEO or ALL"),
    description: Optional[str] = Query(None, description="Case-insensitive text in the group description"),
    min_duplicates: Optional[int] = Query(None, description="Minimum duplicates count"),
    max_duplicates: Optional[int] = Query(None, description="Maximum duplicates count"),
    sort: Optional[str] = Query(None, description="duplicates_desc, newest or oldest"),
    page: Optional[int] = Query(None, description="1-based page number"),
    page_size: Optional[int] = Query(None, description="Groups per page (max 500)"),
    service: GroupQueryService = Depends(get_service),
):
    """List groups matching every supplied filter.

    Out-of-range page and page_size values are clamped rather than rejected.
    """
    try:
        filters = GroupFilters.build(
            page_name=page_name,
            start_date=start_date,
            end_date=end_date,
            media_type=media_type,
            description=description,
            min_duplicates=min_duplicates,
            max_duplicates=max_duplicates,
        )
        result = await service.list_groups(
            tenant_id, filters, page=page, page_size=page_size, sort=sort
        )
    except GroupQueryError as e:
        raise to_http_exception(e) from e

    return PaginatedGroupsResponse(
        data=[_group_response(view) for view in result.items],
        meta=PaginationMeta(
            total=result.total,
            returned=len(result.items),
            page=result.page,
            page_size=result.page_size,
            has_more=result.has_more,
        ),
    )


@router.get("/groups/stats", response_model=GroupStatsResponse)
async def get_group_stats(
    tenant_id: str = Query(..., description="Business scope"),
    service: GroupQueryService = Depends(get_service),
):
    """Get min and max duplicates count to seed the range slider."""
    try:
        stats = await service.get_stats(tenant_id)
    except GroupQueryError as e:
        raise to_http_exception(e) from e
    return GroupStatsResponse(min=stats.min, max=stats.max)


@router.get("/groups/page-names", response_model=list[PageNameResponse])
async def list_page_names(
    tenant_id: str = Query(..., description="Business scope"),
    service: GroupQueryService = Depends(get_service),
):
    """List page names with the number of groups carrying each."""
    try:
        names = await service.list_page_names(tenant_id)
    except GroupQueryError as e:
        raise to_http_exception(e) from e
    return [PageNameResponse(name=n.name, count=n.count) for n in names]


@router.get("/groups/{cluster_id}", response_model=GroupViewResponse)
async def get_group(
    cluster_id: int,
    tenant_id: str = Query(..., description="Business scope"),
    service: GroupQueryService = Depends(get_service),
):
    """Get the card for a single group."""
    try:
        view = await service.get_group_representative(cluster_id, tenant_id)
    except GroupQueryError as e:
        raise to_http_exception(e) from e

    if view is None:
        raise HTTPException(status_code=404, detail="Group not found")
    return _group_response(view)


@router.get("/groups/{cluster_id}/metadata", response_model=GroupMetadataResponse)
async def get_group_metadata(
    cluster_id: int,
    tenant_id: str = Query(..., description="Business scope"),
    service: GroupQueryService = Depends(get_service),
):
    """Get the live creative count, media types and active period of a group."""
    try:
        metadata = await service.get_group_metadata(cluster_id, tenant_id)
    except GroupQueryError as e:
        raise to_http_exception(e) from e

    if metadata is None:
        raise HTTPException(status_code=404, detail="Group has no creatives")
    return GroupMetadataResponse(
        count=metadata.count,
        content_types=list(metadata.content_types),
        first_seen=metadata.first_seen,
        last_seen=metadata.last_seen,
        active_period_days=metadata.active_period_days,
    )


@router.get("/groups/{cluster_id}/members", response_model=MemberPageResponse)
async def list_group_members(
    cluster_id: int,
    tenant_id: str = Query(..., description="Business scope"),
    cursor: Optional[str] = Query(None, description="next_cursor from the previous page"),
    limit: Optional[int] = Query(None, description="Creatives per page (max 500)"),
    exclude_id: Optional[str] = Query(None, description="Creative to leave out"),
    service: GroupQueryService = Depends(get_service),
):
    """List a group's creatives, ordered by external ID."""
    try:
        members = await service.list_group_members(
            cluster_id, tenant_id, cursor=cursor, limit=limit, exclude_id=exclude_id
        )
    except GroupQueryError as e:
        raise to_http_exception(e) from e

    return MemberPageResponse(
        data=[_member_response(m) for m in members.items],
        next_cursor=members.next_cursor,
        has_more=members.has_more,
    )


@router.get("/creatives/{external_id}", response_model=CreativeDetailResponse)
async def get_creative(
    external_id: str,
    tenant_id: str = Query(..., description="Business scope"),
    service: GroupQueryService = Depends(get_service),
):
    """Get a single creative with its group's duplicates count."""
    try:
        detail = await service.get_creative(external_id, tenant_id)
    except GroupQueryError as e:
        raise to_http_exception(e) from e

    if detail is None:
        raise HTTPException(status_code=404, detail="Creative not found")
    return CreativeDetailResponse(
        creative=_member_response(detail.creative),
        duplicates_count=detail.duplicates_count,
    )
