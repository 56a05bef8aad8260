"""Activity timeline: filter facets, filtering, and day grouping."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from storage.models import ActivityEvent

TYPE_LABELS = {
    "TRADE": "Trades",
    "REDEEM": "Redeems",
    "SPLIT": "Splits",
    "MERGE": "Merges",
    "REWARD": "Rewards",
    "CONVERSION": "Conversions",
    "MAKER_REBATE": "Rebates",
    "YIELD": "Yield",
}

TYPE_ICONS = {
    "TRADE": "↔",
    "REDEEM": "✔",
    "SPLIT": "✂",
    "MERGE": "✦",
    "REWARD": "★",
    "CONVERSION": "⇄",
    "MAKER_REBATE": "♨",
    "YIELD": "▲",
}
DEFAULT_ICON = "●"

BUY = "BUY"
SELL = "SELL"
NO_SIDE = ""
UNKNOWN_DAY = "Unknown"
TITLE_LEN = 60


@dataclass
class TimelineFilters:
    """Enabled event types and sides. ``NO_SIDE`` covers redeems, rewards etc."""

    types: Set[str] = field(default_factory=set)
    sides: Set[str] = field(default_factory=lambda: {BUY, SELL, NO_SIDE})

    def toggle_type(self, event_type: str):
        self.types ^= {event_type}

    def toggle_side(self, side: str):
        self.sides ^= {side}

    def accepts(self, event: ActivityEvent) -> bool:
        return (event.type or "TRADE") in self.types and (event.side or NO_SIDE) in self.sides


@dataclass(frozen=True)
class TimelineFacets:
    types: List[Tuple[str, int]]  # (type, count), most frequent first
    buy_count: int
    sell_count: int


def type_label(event_type: str) -> str:
    return TYPE_LABELS.get(event_type, event_type)


def facets(events: Sequence[ActivityEvent]) -> TimelineFacets:
    counts = Counter(e.type or "TRADE" for e in events)
    sides = Counter(e.side for e in events)
    return TimelineFacets(types=counts.most_common(),
                          buy_count=sides[BUY], sell_count=sides[SELL])


def default_filters(events: Sequence[ActivityEvent]) -> TimelineFilters:
    """Everything present enabled."""
    return TimelineFilters(types={t for t, _ in facets(events).types})


def filter_events(events: Iterable[ActivityEvent],
                  filters: TimelineFilters) -> List[ActivityEvent]:
    return [e for e in events if filters.accepts(e)]


def _day_key(ts: int) -> str:
    if not ts:
        return UNKNOWN_DAY
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d")


def group_by_day(events: Iterable[ActivityEvent]) -> List[Tuple[str, List[ActivityEvent]]]:
    """Newest first, grouped by UTC day; undated events land in a trailing group."""
    ordered = sorted(events, key=lambda e: e.timestamp or 0, reverse=True)
    groups: List[Tuple[str, List[ActivityEvent]]] = []
    for event in ordered:
        key = _day_key(event.timestamp)
        if groups and groups[-1][0] == key:
            groups[-1][1].append(event)
        else:
            groups.append((key, [event]))
    return groups


def headline(event: ActivityEvent) -> str:
    """``BUY Market title`` for trades, ``Redeem Market title`` otherwise."""
    event_type = event.type or "TRADE"
    if event_type == "TRADE" and event.side:
        prefix = event.side
    else:
        prefix = event_type.capitalize().replace("_", " ")
    title = event.title or "Unknown Market"
    if len(title) > TITLE_LEN:
        title = title[:TITLE_LEN] + "…"
    return f"{prefix} {title}"


def build_timeline(events: Sequence[ActivityEvent],
                   filters: Optional[TimelineFilters] = None):
    """Day groups for ``events`` under ``filters`` (all types enabled by default)."""
    if filters is None:
        filters = default_filters(events)
    return group_by_day(filter_events(events, filters))


def icon(event_type: str) -> str:
    return TYPE_ICONS.get(event_type or "TRADE", DEFAULT_ICON)


def details(event: ActivityEvent) -> List[str]:
    """Outcome, size, price and USDC amount, skipping the empty ones."""
    parts = []
    if event.outcome:
        parts.append(event.outcome)
    if event.size:
        parts.append(f"{event.size:.2f} shares")
    if event.price:
        parts.append(f"@ {event.price:.2f}")
    if event.usdc_size:
        parts.append(f"${event.usdc_size:,.2f}")
    return parts
