"""Shared fixtures: sample records, snapshots and a mocked data API."""

import httpx
import pytest

from collectors.api_client import AsyncDataClient
from dashboard.recent import RecentLookups
from storage.models import (
    ACTIVITY, CLOSED_POSITIONS, LEADERBOARD, POSITIONS, QUICK_VALUE, TRADES,
    ActivityEvent, LeaderboardEntry, Position, PortfolioSnapshot, Trade,
)

ADDRESS = "0x" + "a" * 40


@pytest.fixture
def address():
    return ADDRESS


@pytest.fixture
def make_position():
    def _make(title="Will it rain?", outcome="Yes", closed=False, **kwargs):
        return Position(title=title, outcome=outcome, is_closed=closed, **kwargs)
    return _make


@pytest.fixture
def make_snapshot():
    """Snapshot with every field loaded (empty unless given)."""
    def _make(positions=(), closed_positions=(), trades=(), activity=(),
              leaderboard=(), quick_value=None, address=ADDRESS):
        snap = PortfolioSnapshot(address=address, generation=1)
        for name, value in ((POSITIONS, positions), (CLOSED_POSITIONS, closed_positions),
                            (TRADES, trades), (ACTIVITY, activity),
                            (LEADERBOARD, leaderboard), (QUICK_VALUE, quick_value)):
            snap = snap.with_field(name, value)
        return snap
    return _make


@pytest.fixture
def sample_snapshot(make_snapshot):
    positions = [
        Position(title="BTC above 100k?", outcome="Yes", size=2000, avg_price=0.475,
                 cur_price=0.5, current_value=1000, cash_pnl=50, percent_pnl=5.26,
                 slug="btc-100k", end_date="2025-12-31T00:00:00Z"),
        Position(title="Fed cuts in March?", outcome="No", size=300, avg_price=0.6,
                 cur_price=0.5, current_value=150, cash_pnl=-30, percent_pnl=-16.7,
                 slug="fed-march", end_date="2025-03-20"),
    ]
    closed = [
        Position(title="Election winner", outcome="Yes", realized_pnl=-20,
                 total_bought=200, avg_price=0.5, close_timestamp=1735689600,
                 is_closed=True, slug="election"),
        Position(title="Oscars best picture", outcome="No", realized_pnl=75,
                 total_bought=100, avg_price=0.25, close_timestamp=1738368000,
                 is_closed=True),
    ]
    trades = [
        Trade(timestamp=1735732800, size=100, price=0.5, side="BUY"),  # 2025-01-01
        Trade(timestamp=1735819200, size=40, price=0.25, side="SELL"),  # 2025-01-02
    ]
    activity = [
        ActivityEvent(type="TRADE", timestamp=1735732800, side="BUY",
                      title="BTC above 100k?", outcome="Yes", size=100, price=0.5,
                      usdc_size=50),
        ActivityEvent(type="REDEEM", timestamp=1738368000, title="Oscars best picture",
                      size=300, usdc_size=300),
    ]
    return make_snapshot(positions=positions, closed_positions=closed, trades=trades,
                         activity=activity,
                         leaderboard=[LeaderboardEntry(rank=1234)],
                         quick_value=1150.0)


@pytest.fixture
def make_client():
    """AsyncDataClient whose requests are answered by ``handler``."""
    def _make(handler):
        return AsyncDataClient(
            base_url="https://data-api.test",
            requests_per_second=10_000,
            burst=10_000,
            transport=httpx.MockTransport(handler),
        )
    return _make


@pytest.fixture
def recent(tmp_path):
    return RecentLookups(path=str(tmp_path / "recent.json"))


class FakeClient:
    """Stands in for AsyncDataClient; records every request."""

    def __init__(self, responder):
        self.responder = responder
        self.calls = []

    async def get_json(self, path, params=None):
        self.calls.append((path, dict(params or {})))
        return self.responder(path, params or {})


@pytest.fixture
def fake_client():
    return FakeClient
