"""Data models for Group Browser storage.

This module contains the record types read from the database. Rows are
created exclusively by the import pipeline and the status snapshot job;
nothing in this package mutates them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

# Cluster id written by the import pipeline for creatives judged unique.
UNCLUSTERED = -1

UNTITLED = "Untitled"


class MediaType(Enum):
    """Creative media types."""
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


@dataclass(frozen=True)
class Tenant:
    """Business scope that owns creatives and groups."""

    id: str
    slug: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class CreativeRecord:
    """One scraped advertisement.

    Attributes:
        external_id: Ad library identifier (unique).
        tenant_id: Owning business.
        page_name: Source page that ran the ad.
        media_type: IMAGE or VIDEO.
        title: Headline as scraped, may contain template markers.
        body: Ad body text.
        caption: Caption line under the media.
        cards_json: Raw carousel cards payload, used for title fallback.
        start_date: Start of the display window.
        end_date: End of the display window.
        cluster_id: Vector group, UNCLUSTERED or None when not assigned.
        media_ref: Opaque pointer resolved by the media store.
    """

    external_id: str
    tenant_id: str
    page_name: Optional[str]
    media_type: MediaType
    title: Optional[str] = None
    body: Optional[str] = None
    caption: Optional[str] = None
    cards_json: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    cluster_id: Optional[int] = None
    media_ref: Optional[str] = None

    @property
    def is_clustered(self) -> bool:
        return self.cluster_id is not None and self.cluster_id != UNCLUSTERED


@dataclass(frozen=True)
class ClusterGroup:
    """A vector group of near-duplicate creatives within one tenant.

    member_count is denormalized by the import pipeline. It is the value used
    for filtering and sorting and may lag the live number of creatives.
    """

    cluster_id: int
    tenant_id: str
    member_count: int
    representative_id: Optional[str]
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class GroupStatusSnapshot:
    """Periodically recomputed change velocity of a group.

    Attributes:
        cluster_id: Group the snapshot belongs to.
        tenant_id: Owning business.
        label: Raw label written by the snapshot job (informational).
        new_count: Members added since the previous snapshot.
        diff_count: Delta shown next to a Scaling badge.
        stale_cycles: Consecutive snapshot cycles without growth.
        previous_snapshot_at: When the previous snapshot was taken.
        updated_at: When this snapshot was taken.
    """

    cluster_id: int
    tenant_id: str
    label: Optional[str] = None
    new_count: Optional[int] = None
    diff_count: Optional[int] = None
    stale_cycles: Optional[int] = None
    previous_snapshot_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class DateRange:
    """Earliest start and latest end across a cluster's creatives."""

    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None


def _usable_title(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return None
    if "{{" in value or value.strip() == UNTITLED:
        return None
    return value.strip()


def title_from_cards(cards_json: Any) -> Optional[str]:
    """Pull a title out of the first carousel card.

    Accepts the raw JSON string or an already decoded list. Looks at the
    card's title, body, name and text fields in that order.
    """
    if not cards_json:
        return None

    cards = cards_json
    if isinstance(cards_json, str):
        try:
            cards = json.loads(cards_json)
        except ValueError:
            return None

    if not isinstance(cards, list) or not cards or not isinstance(cards[0], dict):
        return None

    first = cards[0]
    for key in ("title", "body", "name", "text"):
        candidate = first.get(key)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def effective_title(creative: CreativeRecord) -> str:
    """Title shown for a creative.

    Precedence: a usable title (non-blank, no template markers, not
    "Untitled"), then the first card from cards_json, then the caption,
    then "Untitled".
    """
    return (
        _usable_title(creative.title)
        or title_from_cards(creative.cards_json)
        or _usable_title(creative.caption)
        or UNTITLED
    )
