"""Biggest winning and losing markets across active and closed positions."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import config
from storage.models import Position


@dataclass
class MarketPnl:
    title: str
    pnl: float = 0.0
    slug: Optional[str] = None


def pnl_by_market(positions: Sequence[Position],
                  closed_positions: Sequence[Position]) -> List[MarketPnl]:
    """Sum P&L per market title: unrealized for active, realized for closed.

    Keeps the first non-empty slug seen for each title. Markets whose total is
    exactly zero are dropped.
    """
    by_title: Dict[str, MarketPnl] = {}

    def add(p: Position, amount: float):
        key = p.title or "Unknown"
        entry = by_title.get(key)
        if entry is None:
            entry = by_title[key] = MarketPnl(title=key)
        entry.pnl += amount
        if not entry.slug and p.slug:
            entry.slug = p.slug

    for p in positions:
        add(p, p.cash_pnl)
    for p in closed_positions:
        add(p, p.realized_pnl)

    return [m for m in by_title.values() if m.pnl != 0]


def winners_and_losers(positions: Sequence[Position],
                       closed_positions: Sequence[Position],
                       top_n: int = config.TOP_MOVERS) -> Tuple[List[MarketPnl], List[MarketPnl]]:
    """Top ``top_n`` winners (largest first) and losers (most negative first)."""
    ranked = sorted(pnl_by_market(positions, closed_positions),
                    key=lambda m: m.pnl, reverse=True)
    winners = [m for m in ranked if m.pnl > 0][:top_n]
    losers = sorted((m for m in ranked if m.pnl < 0), key=lambda m: m.pnl)[:top_n]
    return winners, losers
