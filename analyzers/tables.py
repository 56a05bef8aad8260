"""Position and activity tables.

Sorting and paging for the live tables, plus the row builders the HTML and
spreadsheet exports both read from, so every surface shows the same rows.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import config
from analyzers.metrics import PortfolioMetrics
from storage.models import ActivityEvent, Position

ASC = "asc"
DESC = "desc"

# Sort keys are the API's field names
ACTIVE_SORT_KEYS = {
    "currentValue": "current_value",
    "cashPnl": "cash_pnl",
    "percentPnl": "percent_pnl",
    "size": "size",
    "avgPrice": "avg_price",
    "curPrice": "cur_price",
    "endDate": "end_date",
}
CLOSED_SORT_KEYS = {
    "timestamp": "close_timestamp",
    "realizedPnl": "realized_pnl",
    "avgPrice": "avg_price",
    "totalBought": "total_bought",
}
DEFAULT_ACTIVE_SORT = ("currentValue", DESC)
DEFAULT_CLOSED_SORT = ("timestamp", DESC)

# Row key carrying the market slug; not a display column
SLUG = "slug"

ACTIVE_COLUMNS = ["Market", "Outcome", "Shares", "Avg Price", "Current Price",
                  "Value", "P&L", "P&L %", "End Date"]
CLOSED_COLUMNS = ["Market", "Outcome", "Realized P&L", "Return %", "Closed"]
ACTIVITY_COLUMNS = ["Time (UTC)", "Type", "Side", "Market", "Outcome",
                    "Shares", "Price", "USDC"]


def _date_value(value: str) -> float:
    if not value:
        return 0.0
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def _sort_value(p: Position, attr: str) -> float:
    value = getattr(p, attr)
    if attr == "end_date":
        return _date_value(value)
    return float(value or 0)


def sort_positions(positions: Sequence[Position], key: str, direction: str = DESC,
                   closed: bool = False) -> List[Position]:
    keys = CLOSED_SORT_KEYS if closed else ACTIVE_SORT_KEYS
    if key not in keys:
        raise ValueError(f"Unsupported sort key: {key}")
    attr = keys[key]
    return sorted(positions, key=lambda p: _sort_value(p, attr),
                  reverse=(direction == DESC))


def paginate(rows: Sequence[Any], page: int,
             page_size: int = config.TABLE_PAGE_SIZE) -> Tuple[List[Any], int, int]:
    """Slice one page. Returns ``(page_rows, page, total_pages)``.

    ``page`` is clamped into ``1..total_pages``; an empty table has zero pages.
    """
    total_pages = math.ceil(len(rows) / page_size)
    if total_pages == 0:
        return [], 1, 0
    page = max(1, min(page, total_pages))
    start = (page - 1) * page_size
    return list(rows[start:start + page_size]), page, total_pages


def closed_return_pct(p: Position) -> float:
    """Realized P&L over cost basis (total bought x avg price), in percent."""
    cost_basis = p.total_bought * p.avg_price
    return p.realized_pnl / cost_basis * 100 if cost_basis > 0 else 0.0


def _utc(ts: int) -> Optional[datetime]:
    if not ts:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None)


# ── Export rows ──

def active_position_rows(positions: Sequence[Position],
                         sort: Tuple[str, str] = DEFAULT_ACTIVE_SORT) -> List[Dict[str, Any]]:
    return [
        {
            "Market": p.title,
            "Outcome": p.outcome,
            "Shares": round(p.size, 2),
            "Avg Price": round(p.avg_price, 3),
            "Current Price": round(p.cur_price, 3),
            "Value": p.current_value,
            "P&L": p.cash_pnl,
            "P&L %": round(p.percent_pnl, 1),
            "End Date": p.end_date[:10] if p.end_date else "",
            SLUG: p.slug,
        }
        for p in sort_positions(positions, *sort)
    ]


def closed_position_rows(closed_positions: Sequence[Position],
                         sort: Tuple[str, str] = DEFAULT_CLOSED_SORT) -> List[Dict[str, Any]]:
    return [
        {
            "Market": p.title,
            "Outcome": p.outcome,
            "Realized P&L": p.realized_pnl,
            "Return %": round(closed_return_pct(p), 1),
            "Closed": _utc(p.close_timestamp),
            SLUG: p.slug,
        }
        for p in sort_positions(closed_positions, *sort, closed=True)
    ]


def activity_rows(events: Sequence[ActivityEvent]) -> List[Dict[str, Any]]:
    ordered = sorted(events, key=lambda e: e.timestamp or 0, reverse=True)
    return [
        {
            "Time (UTC)": _utc(e.timestamp),
            "Type": e.type,
            "Side": e.side,
            "Market": e.title,
            "Outcome": e.outcome,
            "Shares": round(e.size, 2),
            "Price": e.price,
            "USDC": e.usdc_size,
            SLUG: e.slug,
        }
        for e in ordered
    ]


def summary_rows(address: str, metrics: PortfolioMetrics) -> List[Tuple[str, Any]]:
    return [
        ("Address", address),
        ("Leaderboard Rank", metrics.rank if metrics.rank is not None else "Unknown"),
        ("Total Value", metrics.total_value),
        ("Unrealized P&L", metrics.unrealized_pnl),
        ("Realized P&L", metrics.realized_pnl),
        ("Return %", round(metrics.return_pct * 100, 2)),
        ("Win Rate %", round(metrics.win_rate * 100, 2)),
        ("Active Positions", metrics.active_count),
        ("Closed Positions", metrics.closed_count),
    ]
