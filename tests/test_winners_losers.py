"""Tests for biggest winners and losers."""

from analyzers.winners_losers import pnl_by_market, winners_and_losers
from storage.models import Position


def active(title, pnl, slug=""):
    return Position(title=title, outcome="Yes", cash_pnl=pnl, slug=slug)


def closed(title, pnl, slug=""):
    return Position(title=title, outcome="No", realized_pnl=pnl, is_closed=True, slug=slug)


def test_active_and_closed_sum_per_title():
    markets = pnl_by_market([active("A", 10), active("A", 5)], [closed("A", -3)])
    assert len(markets) == 1
    assert markets[0].pnl == 12


def test_first_non_empty_slug_wins():
    markets = pnl_by_market([active("A", 1), active("A", 1, slug="a-1")],
                            [closed("A", 1, slug="a-2")])
    assert markets[0].slug == "a-1"


def test_zero_totals_are_dropped():
    assert pnl_by_market([active("A", 10)], [closed("A", -10)]) == []


def test_ordering_and_cap():
    positions = [active(f"W{i}", i * 10) for i in range(1, 8)]
    closed_positions = [closed("L1", -5), closed("L2", -50), closed("L3", -20)]
    winners, losers = winners_and_losers(positions, closed_positions)
    assert [m.title for m in winners] == ["W7", "W6", "W5", "W4", "W3"]
    assert [m.title for m in losers] == ["L2", "L3", "L1"]


def test_untitled_positions_group_as_unknown():
    winners, _ = winners_and_losers([active("", 3), active("", 4)], [])
    assert winners[0].title == "Unknown"
    assert winners[0].pnl == 7
