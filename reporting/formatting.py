"""Display formatting shared by the report and the CLI."""

import math
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

import config

MISSING = "—"


def format_usd(value) -> str:
    """``$12.34``, ``$1.50K``, ``-$2.10M``."""
    try:
        num = float(value)
    except (TypeError, ValueError):
        return MISSING
    if math.isnan(num):
        return MISSING
    sign = "-" if num < 0 else ""
    abs_num = abs(num)
    if abs_num >= 1e6:
        return f"{sign}${abs_num / 1e6:.2f}M"
    if abs_num >= 1e3:
        return f"{sign}${abs_num / 1e3:.2f}K"
    return f"{sign}${abs_num:.2f}"


def format_pct(fraction) -> str:
    """Signed percent from a fraction: 0.0316 -> ``+3.2%``."""
    try:
        num = float(fraction)
    except (TypeError, ValueError):
        return MISSING
    if math.isnan(num):
        return MISSING
    return f"{'+' if num >= 0 else ''}{num * 100:.1f}%"


def format_rank(rank: Optional[int]) -> str:
    return f"#{rank:,}" if rank else MISSING


def format_date(value) -> str:
    """``Mar 5, 2025`` from epoch seconds, a datetime or an ISO string."""
    if not value:
        return MISSING
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        dt = datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return MISSING
    return f"{dt:%b} {dt.day}, {dt.year}"


def market_url(slug: Optional[str]) -> Optional[str]:
    return f"{config.MARKET_URL_BASE}/market/{quote(slug)}" if slug else None


def profile_url(address: str) -> str:
    return f"{config.MARKET_URL_BASE}/@{address}"


def export_filename(address: str, extension: str) -> str:
    return f"{config.EXPORT_PREFIX}-{address.lower()}.{extension}"
