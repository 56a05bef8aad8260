"""Tests for allocation bucketing."""

import pytest

from analyzers.allocation import (
    AllocationBucket, allocation_by_position, allocation_shares, bucket_allocation,
)
from storage.models import Position


def buckets(*values):
    return [AllocationBucket(label=f"M{i}", full_label=f"Market {i}", value=v)
            for i, v in enumerate(values)]


class TestBucketAllocation:
    def test_tail_collapses_into_other(self):
        result = bucket_allocation(buckets(100, 80, 60, 40, 20), max_slices=3)
        assert [b.value for b in result] == [100, 80, 120]
        other = result[-1]
        assert other.label == "Other (3)"
        assert other.full_label == "Other - [Market 2, Market 3, Market 4]"
        assert other.members == 3
        assert other.slug is None
        assert sum(b.value for b in result) == 300

    def test_fits_unchanged(self):
        items = buckets(5, 4, 3)
        assert bucket_allocation(items, max_slices=3) == items

    def test_default_cap(self):
        result = bucket_allocation(buckets(*range(30, 0, -1)))
        assert len(result) == 14
        assert result[-1].label == "Other (17)"


class TestAllocationByPosition:
    def test_filters_sorts_and_labels(self):
        positions = [
            Position(title="Small", outcome="No", current_value=5, slug="small"),
            Position(title="Dead", outcome="Yes", current_value=0),
            Position(title="Big", outcome="Yes", current_value=50, slug="big"),
        ]
        result = allocation_by_position(positions)
        assert [b.full_label for b in result] == ["Big (Yes)", "Small (No)"]
        assert result[0].slug == "big"

    def test_long_labels_are_truncated(self):
        p = Position(title="x" * 80, outcome="Yes", current_value=1)
        bucket = allocation_by_position([p])[0]
        assert bucket.label == ("x" * 80 + " (Yes)")[:50] + "…"
        assert bucket.full_label == "x" * 80 + " (Yes)"

    def test_no_value_no_buckets(self):
        assert allocation_by_position([]) == []


def test_shares():
    assert allocation_shares(buckets(75, 25)) == pytest.approx([0.75, 0.25])
    assert allocation_shares(buckets(0, 0)) == [0.0, 0.0]
