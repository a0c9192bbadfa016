"""Result types returned by the group query service.

All results are frozen so cached instances can be shared between requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from storage.models import CreativeRecord, MediaType, effective_title

from .status_classifier import GroupStatus

DEFAULT_DEEP_LINK_TEMPLATE = "https://www.facebook.com/ads/library/?id={external_id}"


def deep_link(external_id: str, template: str = DEFAULT_DEEP_LINK_TEMPLATE) -> str:
    """Ad library link for a creative."""
    return template.format(external_id=external_id)


@dataclass(frozen=True)
class CreativeSummary:
    """Representative creative as shown on a group card."""

    external_id: str
    title: str
    page_name: Optional[str]
    media_type: MediaType
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    media_ref: Optional[str]
    media_url: Optional[str] = None

    @classmethod
    def from_record(cls, creative: CreativeRecord, media_url: Optional[str] = None) -> "CreativeSummary":
        return cls(
            external_id=creative.external_id,
            title=effective_title(creative),
            page_name=creative.page_name,
            media_type=creative.media_type,
            start_date=creative.start_date,
            end_date=creative.end_date,
            media_ref=creative.media_ref,
            media_url=media_url,
        )


@dataclass(frozen=True)
class GroupView:
    """One group card."""

    cluster_id: int
    representative: CreativeSummary
    duplicates_count: int
    first_seen: Optional[datetime]
    last_seen: Optional[datetime]
    status: GroupStatus
    diff_count: int
    description: Optional[str]
    deep_link: str


@dataclass(frozen=True)
class GroupPage:
    """One page of group cards plus the total number of matching groups."""

    items: tuple[GroupView, ...]
    total: int
    page: int
    page_size: int

    @property
    def has_more(self) -> bool:
        return self.page * self.page_size < self.total


@dataclass(frozen=True)
class GroupStats:
    """Member count bounds used to seed range filter controls."""

    min: int
    max: int


@dataclass(frozen=True)
class GroupMetadata:
    """Live aggregate over a single group's creatives."""

    count: int
    content_types: tuple[str, ...]
    first_seen: Optional[datetime]
    last_seen: Optional[datetime]
    active_period_days: int


@dataclass(frozen=True)
class MemberView:
    """One creative in a group drill-down."""

    external_id: str
    title: str
    page_name: Optional[str]
    body: Optional[str]
    caption: Optional[str]
    media_type: MediaType
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    cluster_id: Optional[int]
    media_ref: Optional[str]
    deep_link: str

    @classmethod
    def from_record(cls, creative: CreativeRecord, link_template: str) -> "MemberView":
        return cls(
            external_id=creative.external_id,
            title=effective_title(creative),
            page_name=creative.page_name,
            body=creative.body,
            caption=creative.caption,
            media_type=creative.media_type,
            start_date=creative.start_date,
            end_date=creative.end_date,
            cluster_id=creative.cluster_id,
            media_ref=creative.media_ref,
            deep_link=deep_link(creative.external_id, link_template),
        )


@dataclass(frozen=True)
class MemberPage:
    """Keyset page of group members."""

    items: tuple[MemberView, ...]
    next_cursor: Optional[str]
    has_more: bool


@dataclass(frozen=True)
class PageNameCount:
    """A source page and how many groups carry it."""

    name: str
    count: int


@dataclass(frozen=True)
class CreativeDetail:
    """Single creative with its group's authoritative duplicates count."""

    creative: MemberView
    duplicates_count: int
