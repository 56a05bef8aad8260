"""Data models for a wallet's portfolio snapshot."""

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Optional, Tuple

# Snapshot fields, one per upstream lookup
POSITIONS = "positions"
CLOSED_POSITIONS = "closed_positions"
TRADES = "trades"
ACTIVITY = "activity"
LEADERBOARD = "leaderboard"
QUICK_VALUE = "quick_value"

CORE_FIELDS = (POSITIONS, CLOSED_POSITIONS, TRADES, ACTIVITY)
ALL_FIELDS = CORE_FIELDS + (LEADERBOARD, QUICK_VALUE)


@dataclass(frozen=True)
class Position:
    title: str
    outcome: str
    size: float = 0.0  # shares held (0 for closed)
    avg_price: float = 0.0
    cur_price: float = 0.0  # mark price, or resolution price once closed
    current_value: float = 0.0
    cash_pnl: float = 0.0  # unrealized, active only
    percent_pnl: float = 0.0  # already in percent units, e.g. 12.5
    realized_pnl: float = 0.0
    total_bought: float = 0.0
    slug: str = ""
    event_slug: str = ""
    end_date: str = ""
    close_timestamp: int = 0  # epoch seconds, closed only
    is_closed: bool = False
    asset: str = ""  # token ID
    condition_id: str = ""

    @property
    def label(self) -> str:
        """Market title with the outcome in parentheses."""
        title = self.title or "Unknown"
        return f"{title} ({self.outcome})" if self.outcome else title


@dataclass(frozen=True)
class Trade:
    timestamp: int  # epoch seconds
    size: float
    price: float
    side: str = ""  # BUY or SELL
    title: str = ""
    outcome: str = ""
    slug: str = ""


@dataclass(frozen=True)
class ActivityEvent:
    type: str  # TRADE, REDEEM, SPLIT, MERGE, REWARD, CONVERSION, MAKER_REBATE, YIELD
    timestamp: int  # epoch seconds, 0 if unknown
    side: str = ""  # BUY, SELL or empty for non-trade events
    title: str = ""
    slug: str = ""
    outcome: str = ""
    size: float = 0.0
    price: float = 0.0
    usdc_size: float = 0.0
    transaction_hash: str = ""


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: Optional[int]
    user_name: str = ""
    pnl: float = 0.0
    volume: float = 0.0


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Everything fetched for one address in one lookup generation.

    Collections default to empty so a partially loaded snapshot is always
    safe to render; ``loaded`` records which fields have actually arrived.
    """

    address: str
    generation: int
    positions: Tuple[Position, ...] = ()
    closed_positions: Tuple[Position, ...] = ()
    trades: Tuple[Trade, ...] = ()
    activity: Tuple[ActivityEvent, ...] = ()
    leaderboard: Tuple[LeaderboardEntry, ...] = ()
    quick_value: Optional[float] = None
    loaded: FrozenSet[str] = field(default_factory=frozenset)

    def with_field(self, name: str, value) -> "PortfolioSnapshot":
        if name not in ALL_FIELDS:
            raise KeyError(f"Unknown snapshot field: {name}")
        if name != QUICK_VALUE:
            value = tuple(value or ())
        return replace(self, **{name: value, "loaded": self.loaded | {name}})

    def has(self, *names: str) -> bool:
        return all(name in self.loaded for name in names)

    @property
    def is_complete(self) -> bool:
        return self.has(*ALL_FIELDS)
