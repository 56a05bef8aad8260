"""Configuration for the Polymarket wallet portfolio dashboard."""

import os

# API base URLs (no auth required)
DATA_API_BASE = os.environ.get("DATA_API_BASE", "https://data-api.polymarket.com")
MARKET_URL_BASE = "https://polymarket.com"

# Per-endpoint pagination ceilings: (page size, max offset).
# Empirical upstream limits, not negotiated by the API:
#   /positions       : accepts large limits (500 tested)
#   /closed-positions: hard cap at 50 per page (silently truncates)
#   /trades          : max 10,000 per page, offset max 10,000
#   /activity        : max 500 per page, offset max 10,000
ENDPOINT_LIMITS = {
    "positions": (500, 100_000),
    "closed-positions": (50, 100_000),
    "trades": (10_000, 10_000),
    "activity": (500, 10_000),
}

LEADERBOARD_TIME_PERIOD = "ALL"

# Rate limiting (shared by every concurrent fetch)
RATE_LIMIT_REQUESTS_PER_SECOND = float(os.environ.get("RATE_LIMIT_RPS", "10"))
RATE_LIMIT_BURST = 20

# Transport timeout in seconds; no retries are performed
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "30"))
USER_AGENT = "PolyfolioDashboard/1.0"

# Dashboard presentation
ALLOCATION_MAX_SLICES = 14
ALLOCATION_LABEL_LEN = 50
TOP_MOVERS = 5
VOLUME_MA_WINDOW = 7
TABLE_PAGE_SIZE = 50
MAX_RECENT = 5

# Paths
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.environ.get("POLYFOLIO_DATA_DIR", os.path.join(BASE_DIR, "data"))
RECENT_PATH = os.path.join(DATA_DIR, "recent.json")
OUTPUT_DIR = os.path.join(BASE_DIR, "output")
EXPORT_PREFIX = "polyfolio"
