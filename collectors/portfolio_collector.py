"""Collect a wallet's full portfolio snapshot from the data API.

Six lookups run concurrently on one event loop:

    positions, closed-positions, trades, activity   (paginated, "core")
    v1/leaderboard                                   (single shot)
    value                                            (single shot, best effort)

Each lookup writes its own snapshot field the moment it lands, so panels that
depend only on that field can render before the slower endpoints finish.
A failed lookup contributes an empty result for its field alone; only when
all four core endpoints fail is the whole load a failure.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import config
from collectors.api_client import RequestError, decode_rows
from collectors.paginator import ENDPOINTS, PageResult, fetch_all_pages
from storage.models import (
    ACTIVITY, CLOSED_POSITIONS, LEADERBOARD, POSITIONS, QUICK_VALUE, TRADES,
    ActivityEvent, LeaderboardEntry, Position, PortfolioSnapshot, Trade,
)
from storage.state import SnapshotStore

logger = logging.getLogger(__name__)

TOTAL_FAILURE_MESSAGE = "Failed to load portfolio. Check the address and try again."


class PortfolioLoadError(Exception):
    """Every core endpoint failed for an address."""

    def __init__(self, address: str, errors: Optional[List[RequestError]] = None):
        self.address = address
        self.errors = errors or []
        super().__init__(TOTAL_FAILURE_MESSAGE)


# ── Parsing ──

def _num(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _epoch_seconds(value: Any) -> int:
    """Epoch seconds from seconds, milliseconds or an ISO-8601 string."""
    if value is None or value == "":
        return 0
    if isinstance(value, str) and _num(value, default=None) is None:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return 0
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(dt.timestamp())
    ts = _num(value)
    if ts > 1e12:
        ts /= 1000
    return int(ts)


def _parse_open_position(raw: dict) -> Position:
    """Convert an open position API record to a Position model."""
    return Position(
        title=raw.get("title") or "",
        outcome=raw.get("outcome") or "",
        size=_num(raw.get("size")),
        avg_price=_num(raw.get("avgPrice")),
        cur_price=_num(raw.get("curPrice")),
        current_value=_num(raw.get("currentValue")),
        cash_pnl=_num(raw.get("cashPnl")),
        percent_pnl=_num(raw.get("percentPnl")),
        realized_pnl=_num(raw.get("realizedPnl")),
        total_bought=_num(raw.get("totalBought")),
        slug=raw.get("slug") or "",
        event_slug=raw.get("eventSlug") or "",
        end_date=raw.get("endDate") or "",
        is_closed=False,
        asset=raw.get("asset") or "",
        condition_id=raw.get("conditionId") or "",
    )


def _parse_closed_position(raw: dict) -> Position:
    """Convert a closed position API record to a Position model."""
    return Position(
        title=raw.get("title") or "",
        outcome=raw.get("outcome") or "",
        size=0.0,  # nothing held once closed
        avg_price=_num(raw.get("avgPrice")),
        cur_price=_num(raw.get("curPrice")),
        current_value=0.0,
        cash_pnl=0.0,
        realized_pnl=_num(raw.get("realizedPnl")),
        total_bought=_num(raw.get("totalBought")),
        slug=raw.get("slug") or "",
        event_slug=raw.get("eventSlug") or "",
        end_date=raw.get("endDate") or "",
        close_timestamp=_epoch_seconds(raw.get("timestamp")),
        is_closed=True,
        asset=raw.get("asset") or "",
        condition_id=raw.get("conditionId") or "",
    )


def _parse_trade(raw: dict) -> Trade:
    return Trade(
        timestamp=_epoch_seconds(raw.get("timestamp") or raw.get("createdAt")),
        size=_num(raw.get("size")),
        price=_num(raw.get("price")),
        side=raw.get("side") or "",
        title=raw.get("title") or "",
        outcome=raw.get("outcome") or "",
        slug=raw.get("slug") or "",
    )


def _parse_activity(raw: dict) -> ActivityEvent:
    return ActivityEvent(
        type=raw.get("type") or "TRADE",
        timestamp=_epoch_seconds(raw.get("timestamp")),
        side=raw.get("side") or "",
        title=raw.get("title") or "",
        slug=raw.get("slug") or raw.get("eventSlug") or "",
        outcome=raw.get("outcome") or "",
        size=_num(raw.get("size")),
        price=_num(raw.get("price")),
        usdc_size=_num(raw.get("usdcSize")),
        transaction_hash=raw.get("transactionHash") or "",
    )


def _parse_leaderboard_entry(raw: dict) -> LeaderboardEntry:
    rank = raw.get("rank")
    return LeaderboardEntry(
        rank=int(_num(rank)) if rank not in (None, "") else None,
        user_name=raw.get("userName") or "",
        pnl=_num(raw.get("pnl")),
        volume=_num(raw.get("vol")),
    )


def _parse_quick_value(payload: Any) -> Optional[float]:
    """The /value endpoint answers ``[{"user": ..., "value": ...}]``."""
    if isinstance(payload, dict) and "value" in payload:
        return _num(payload["value"], default=None)
    rows = decode_rows(payload).rows
    if rows and isinstance(rows[0], dict) and "value" in rows[0]:
        return _num(rows[0]["value"], default=None)
    return None


# ── Collection ──

CORE_ENDPOINTS = (
    (POSITIONS, "positions", _parse_open_position),
    (CLOSED_POSITIONS, "closed-positions", _parse_closed_position),
    (TRADES, "trades", _parse_trade),
    (ACTIVITY, "activity", _parse_activity),
)


async def _collect_endpoint(client, store: SnapshotStore, generation: int,
                            address: str, name: str, path: str,
                            parse) -> PageResult:
    result = await fetch_all_pages(client, path, address, ENDPOINTS[path])
    if result.failed:
        logger.info("%s: request failed, using empty result (%s)", path, result.error)
    rows = [parse(raw) for raw in result.rows if isinstance(raw, dict)]
    store.apply(generation, name, rows)
    return result


async def _collect_leaderboard(client, store: SnapshotStore, generation: int,
                               address: str):
    params = {"user": address, "timePeriod": config.LEADERBOARD_TIME_PERIOD}
    try:
        payload = await client.get_json("/v1/leaderboard", params=params)
        rows = decode_rows(payload).rows
    except RequestError as e:
        logger.debug("leaderboard lookup failed: %s", e)
        rows = []
    entries = [_parse_leaderboard_entry(raw) for raw in rows if isinstance(raw, dict)]
    store.apply(generation, LEADERBOARD, entries)


async def _collect_quick_value(client, store: SnapshotStore, generation: int,
                               address: str):
    try:
        value = _parse_quick_value(await client.get_json("/value", params={"user": address}))
    except RequestError as e:
        logger.debug("value lookup failed: %s", e)
        value = None
    store.apply(generation, QUICK_VALUE, value)


async def load_portfolio(client, address: str, store: SnapshotStore,
                         generation: int) -> Optional[PortfolioSnapshot]:
    """Fetch every endpoint for ``address`` into ``store`` under ``generation``.

    Returns the finished snapshot, or None if the generation went stale while
    the requests were in flight. Raises PortfolioLoadError when all four core
    endpoints failed.
    """
    core = [
        _collect_endpoint(client, store, generation, address, name, path, parse)
        for name, path, parse in CORE_ENDPOINTS
    ]
    results = await asyncio.gather(
        *core,
        _collect_leaderboard(client, store, generation, address),
        _collect_quick_value(client, store, generation, address),
    )
    core_results: List[PageResult] = list(results[:len(CORE_ENDPOINTS)])

    if all(r.failed for r in core_results):
        raise PortfolioLoadError(address, [r.error for r in core_results])

    if not store.complete(generation):
        return None
    return store.current
