"""Summary metrics: value, P&L, return, win rate, leaderboard rank."""

from dataclasses import dataclass
from typing import Optional, Sequence

from storage.models import (
    CLOSED_POSITIONS, LEADERBOARD, POSITIONS,
    LeaderboardEntry, Position, PortfolioSnapshot,
)

REQUIRED_FIELDS = (POSITIONS, CLOSED_POSITIONS, LEADERBOARD)


@dataclass(frozen=True)
class PortfolioMetrics:
    total_value: float
    unrealized_pnl: float
    realized_pnl: float
    return_pct: float  # fraction, 0.0316 == 3.16%
    win_rate: float  # fraction of decided closed positions that won
    rank: Optional[int]  # None == unknown
    active_count: int
    closed_count: int
    quick_value: Optional[float] = None

    @property
    def total_pnl(self) -> float:
        return self.unrealized_pnl + self.realized_pnl

    @property
    def cost_basis(self) -> float:
        return self.total_value - self.unrealized_pnl


def win_rate(closed_positions: Sequence[Position]) -> float:
    """Winners over decided closes; exactly-zero P&L closes count for neither."""
    decided = [p for p in closed_positions if p.realized_pnl != 0]
    if not decided:
        return 0.0
    wins = sum(1 for p in decided if p.realized_pnl > 0)
    return wins / len(decided)


def leaderboard_rank(leaderboard: Sequence[LeaderboardEntry]) -> Optional[int]:
    if not leaderboard:
        return None
    return leaderboard[0].rank


def portfolio_metrics(positions: Sequence[Position],
                      closed_positions: Sequence[Position],
                      leaderboard: Sequence[LeaderboardEntry] = (),
                      quick_value: Optional[float] = None) -> PortfolioMetrics:
    total_value = sum(p.current_value for p in positions)
    unrealized = sum(p.cash_pnl for p in positions)
    realized = sum(p.realized_pnl for p in closed_positions)

    # Return on the capital still at work plus what has been booked
    cost_basis = total_value - unrealized
    return_pct = (unrealized + realized) / cost_basis if cost_basis > 0 else 0.0

    return PortfolioMetrics(
        total_value=total_value,
        unrealized_pnl=unrealized,
        realized_pnl=realized,
        return_pct=return_pct,
        win_rate=win_rate(closed_positions),
        rank=leaderboard_rank(leaderboard),
        active_count=len(positions),
        closed_count=len(closed_positions),
        quick_value=quick_value,
    )


def compute_metrics(snapshot: Optional[PortfolioSnapshot]) -> Optional[PortfolioMetrics]:
    """Metrics for ``snapshot``, or None until every input has arrived.

    Safe to call after each field lands; it stays a no-op until ready.
    """
    if snapshot is None or not snapshot.has(*REQUIRED_FIELDS):
        return None
    return portfolio_metrics(snapshot.positions, snapshot.closed_positions,
                             snapshot.leaderboard, snapshot.quick_value)
