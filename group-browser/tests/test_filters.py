"""Tests for filter inputs and candidate set intersection.

Run with: pytest tests/test_filters.py -v
"""

import itertools
from datetime import date, datetime, timedelta, timezone

import pytest

from services.errors import InvalidFilter
from services.filters import DuplicateRangeFilter, GroupFilters, SortKey, intersect_all
from services.pagination import MAX_PAGE_SIZE, PageRequest
from storage.models import MediaType


class TestIntersectAll:
    """Tests for the candidate set reducer."""

    def test_no_active_family_is_unbounded(self):
        assert intersect_all([]) is None
        assert intersect_all([None, None]) is None

    def test_empty_set_is_not_unbounded(self):
        result = intersect_all([None, frozenset()])
        assert result == frozenset()
        assert result is not None

    def test_single_family_passes_through(self):
        assert intersect_all([None, frozenset({1, 2})]) == frozenset({1, 2})

    def test_intersection(self):
        assert intersect_all([frozenset({1, 2, 3}), frozenset({2, 3, 4})]) == frozenset({2, 3})

    def test_order_does_not_matter(self):
        sets = [frozenset({1, 2, 3, 4}), frozenset({2, 3, 4}), None, frozenset({3, 4, 9})]
        results = {intersect_all(list(p)) for p in itertools.permutations(sets)}
        assert results == {frozenset({3, 4})}

    def test_grouping_does_not_matter(self):
        a, b, c = frozenset({1, 2, 3}), frozenset({2, 3}), frozenset({3, 5})
        left = intersect_all([intersect_all([a, b]), c])
        right = intersect_all([a, intersect_all([b, c])])
        assert left == right == frozenset({3})


class TestDuplicateRangeFilter:
    """Tests for duplicate range validation."""

    def test_defaults(self):
        duplicates = DuplicateRangeFilter()
        assert duplicates.min == 1
        assert duplicates.max is None
        assert duplicates.is_default

    def test_bounded_range_is_not_default(self):
        assert not DuplicateRangeFilter(min=3, max=100).is_default
        assert not DuplicateRangeFilter(min=1, max=10).is_default

    def test_inverted_range_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            DuplicateRangeFilter(min=10, max=3)
        assert exc_info.value.field == "max_duplicates"

    def test_negative_min_rejected(self):
        with pytest.raises(InvalidFilter):
            DuplicateRangeFilter(min=-1)

    def test_non_integer_rejected(self):
        with pytest.raises(InvalidFilter):
            DuplicateRangeFilter(min="3")


class TestGroupFilters:
    """Tests for GroupFilters normalization."""

    def test_build_with_nothing_is_empty(self):
        filters = GroupFilters.build()
        assert filters == GroupFilters()
        assert not filters.has_display_window

    def test_blank_strings_are_inactive(self):
        filters = GroupFilters.build(page_name="  ", description="", media_type=" ")
        assert filters.page_name is None
        assert filters.description is None
        assert filters.media_type is None

    def test_all_media_is_inactive(self):
        assert GroupFilters.build(media_type="ALL").media_type is None
        assert GroupFilters.build(media_type="all").media_type is None

    def test_media_type_parsed(self):
        assert GroupFilters.build(media_type="video").media_type is MediaType.VIDEO

    def test_unknown_media_type_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            GroupFilters.build(media_type="CAROUSEL")
        assert exc_info.value.field == "media_type"

    def test_inverted_window_rejected(self):
        with pytest.raises(InvalidFilter):
            GroupFilters.build(start_date=date(2024, 3, 10), end_date=date(2024, 3, 1))

    def test_same_day_window_allowed(self):
        filters = GroupFilters.build(start_date=date(2024, 3, 1), end_date=date(2024, 3, 1))
        assert filters.has_display_window

    def test_aware_and_naive_bounds_compare(self):
        start = datetime(2024, 3, 1, 12, tzinfo=timezone(timedelta(hours=2)))
        filters = GroupFilters.build(start_date=start, end_date=date(2024, 3, 2))
        assert filters.start_date == start

    def test_only_min_duplicates(self):
        filters = GroupFilters.build(min_duplicates=5)
        assert filters.duplicates == DuplicateRangeFilter(min=5, max=None)

    def test_only_max_duplicates(self):
        filters = GroupFilters.build(max_duplicates=5)
        assert filters.duplicates == DuplicateRangeFilter(min=1, max=5)

    def test_default_range_fingerprints_like_no_range(self):
        explicit = GroupFilters.build(min_duplicates=1)
        omitted = GroupFilters.build()
        assert explicit.fingerprint_fields() == omitted.fingerprint_fields()

    def test_description_fingerprint_ignores_case(self):
        upper = GroupFilters.build(description="SUMMER Sale")
        lower = GroupFilters.build(description="summer sale")
        assert upper.fingerprint_fields() == lower.fingerprint_fields()


class TestSortKey:
    """Tests for sort key parsing."""

    def test_default(self):
        assert SortKey.parse(None) is SortKey.DUPLICATES_DESC
        assert SortKey.parse("") is SortKey.DUPLICATES_DESC

    def test_known_keys(self):
        assert SortKey.parse("newest") is SortKey.NEWEST
        assert SortKey.parse("OLDEST") is SortKey.OLDEST
        assert SortKey.parse(SortKey.NEWEST) is SortKey.NEWEST

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidFilter) as exc_info:
            SortKey.parse("random")
        assert exc_info.value.field == "sort"
        assert not exc_info.value.retryable


class TestPageRequest:
    """Tests for pagination clamping."""

    def test_defaults(self):
        request = PageRequest.clamp(None, None)
        assert request == PageRequest(page=1, page_size=24)
        assert request.offset == 0

    def test_clamps_low_values(self):
        assert PageRequest.clamp(0, 0) == PageRequest(page=1, page_size=1)
        assert PageRequest.clamp(-5, -10) == PageRequest(page=1, page_size=1)

    def test_clamps_page_size_to_max(self):
        assert PageRequest.clamp(1, 10_000).page_size == MAX_PAGE_SIZE

    def test_offset(self):
        assert PageRequest.clamp(3, 10).offset == 20
