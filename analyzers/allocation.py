"""Allocation by position, with the long tail folded into one "Other" slice."""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import config
from storage.models import Position


@dataclass(frozen=True)
class AllocationBucket:
    label: str  # short legend label
    full_label: str
    value: float
    slug: Optional[str] = None
    members: int = 1


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + "…" if len(text) > limit else text


def bucket_allocation(items: Sequence[AllocationBucket],
                      max_slices: int = config.ALLOCATION_MAX_SLICES) -> List[AllocationBucket]:
    """Keep the first ``max_slices - 1`` items and collapse the rest.

    ``items`` is expected sorted by value, descending. When everything fits
    the items come back unchanged; otherwise the remainder becomes a single
    bucket whose value is their sum and whose full label names them all.
    """
    items = list(items)
    if len(items) <= max_slices:
        return items

    top = items[:max_slices - 1]
    rest = items[max_slices - 1:]
    names = ", ".join(i.full_label or i.label for i in rest)
    other = AllocationBucket(
        label=f"Other ({len(rest)})",
        full_label=f"Other - [{names}]",
        value=sum(i.value for i in rest),
        slug=None,
        members=len(rest),
    )
    return top + [other]


def allocation_by_position(positions: Sequence[Position],
                           max_slices: int = config.ALLOCATION_MAX_SLICES) -> List[AllocationBucket]:
    items = [
        AllocationBucket(
            label=_truncate(p.label, config.ALLOCATION_LABEL_LEN),
            full_label=p.label,
            value=p.current_value,
            slug=p.slug or None,
        )
        for p in positions
        if p.current_value > 0
    ]
    items.sort(key=lambda b: b.value, reverse=True)
    return bucket_allocation(items, max_slices)


def allocation_shares(buckets: Sequence[AllocationBucket]) -> List[float]:
    """Each bucket's fraction of the total (zeros when the total is zero)."""
    total = sum(b.value for b in buckets)
    return [b.value / total if total else 0.0 for b in buckets]
