"""Filter inputs and candidate-set algebra for group queries.

A candidate set is Optional[frozenset[int]]: None means unrestricted (no
predicate family was active), an empty frozenset means nothing matches.
The two must never be confused.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from functools import reduce
from typing import Any, Iterable, Optional

from storage.models import MediaType

from .errors import InvalidFilter

CandidateSet = Optional[frozenset]

# UI value meaning "any media type"
ALL_MEDIA = "ALL"


class SortKey(Enum):
    """Group orderings. Ties always break on cluster id ascending."""
    DUPLICATES_DESC = "duplicates_desc"
    NEWEST = "newest"
    OLDEST = "oldest"

    @classmethod
    def parse(cls, value: Any) -> "SortKey":
        if value is None or value == "":
            return cls.DUPLICATES_DESC
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(k.value for k in cls)
            raise InvalidFilter(f"Unknown sort key '{value}' (allowed: {allowed})", field="sort")


@dataclass(frozen=True)
class DuplicateRangeFilter:
    """Inclusive bounds on a group's denormalized member count."""

    min: int = 1
    max: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.min, bool) or not isinstance(self.min, int):
            raise InvalidFilter("Duplicate range min must be an integer", field="min_duplicates")
        if self.max is not None and (isinstance(self.max, bool) or not isinstance(self.max, int)):
            raise InvalidFilter("Duplicate range max must be an integer", field="max_duplicates")
        if self.min < 0:
            raise InvalidFilter("Duplicate range min must not be negative", field="min_duplicates")
        if self.max is not None and self.max < self.min:
            raise InvalidFilter(
                f"Duplicate range is inverted ({self.min} > {self.max})",
                field="max_duplicates",
            )

    @property
    def is_default(self) -> bool:
        """True when the range excludes nothing a group listing would show."""
        return self.min <= 1 and self.max is None


@dataclass(frozen=True)
class GroupFilters:
    """Independent predicate families for a group listing.

    Creative-level: page_name, start_date/end_date, media_type.
    Group-level: description, duplicates.
    A family left as None is inactive.
    """

    page_name: Optional[str] = None
    start_date: Optional[date | datetime] = None
    end_date: Optional[date | datetime] = None
    media_type: Optional[MediaType] = None
    description: Optional[str] = None
    duplicates: Optional[DuplicateRangeFilter] = None

    @classmethod
    def build(
        cls,
        page_name: Optional[str] = None,
        start_date: Optional[date | datetime] = None,
        end_date: Optional[date | datetime] = None,
        media_type: Optional[str | MediaType] = None,
        description: Optional[str] = None,
        min_duplicates: Optional[int] = None,
        max_duplicates: Optional[int] = None,
    ) -> "GroupFilters":
        """Normalize raw inputs, rejecting malformed ones.

        Blank strings count as not supplied and "ALL" means any media type.

        Raises:
            InvalidFilter: On inverted ranges or unknown media types.
        """
        duplicates = None
        if min_duplicates is not None or max_duplicates is not None:
            duplicates = DuplicateRangeFilter(
                min=1 if min_duplicates is None else min_duplicates,
                max=max_duplicates,
            )

        filters = cls(
            page_name=_clean_text(page_name),
            start_date=start_date,
            end_date=end_date,
            media_type=_parse_media_type(media_type),
            description=_clean_text(description),
            duplicates=duplicates,
        )
        filters.validate()
        return filters

    def validate(self) -> None:
        """Check cross-field consistency.

        Raises:
            InvalidFilter: If the display window is inverted.
        """
        if self.start_date is not None and self.end_date is not None:
            if _as_datetime(self.start_date) > _as_datetime(self.end_date):
                raise InvalidFilter("start_date is after end_date", field="start_date")
        if self.media_type is not None and not isinstance(self.media_type, MediaType):
            raise InvalidFilter(f"Unknown media type '{self.media_type}'", field="media_type")

    @property
    def has_display_window(self) -> bool:
        return self.start_date is not None or self.end_date is not None

    def fingerprint_fields(self) -> dict[str, Any]:
        """Canonical, JSON-ready view used in cache fingerprints."""
        duplicates = self.duplicates
        if duplicates is not None and duplicates.is_default:
            duplicates = None
        return {
            "page_name": self.page_name,
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "media_type": self.media_type.value if self.media_type else None,
            "description": self.description.casefold() if self.description else None,
            "duplicates": [duplicates.min, duplicates.max] if duplicates else None,
        }


def intersect_all(sets: Iterable[CandidateSet]) -> CandidateSet:
    """Intersect the id sets of every active predicate family.

    None entries (inactive families) are ignored. With no active family the
    result is None, meaning unrestricted; otherwise the plain intersection.
    The reduction is associative and commutative.
    """
    active = [frozenset(s) for s in sets if s is not None]
    if not active:
        return None
    return reduce(frozenset.intersection, active)


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_media_type(value: Optional[str | MediaType]) -> Optional[MediaType]:
    if value is None or isinstance(value, MediaType):
        return value
    text = value.strip().upper()
    if not text or text == ALL_MEDIA:
        return None
    try:
        return MediaType(text)
    except ValueError:
        raise InvalidFilter(f"Unknown media type '{value}'", field="media_type")


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)
    return datetime(value.year, value.month, value.day)


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
