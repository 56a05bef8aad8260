"""Rate-limited async HTTP client for the Polymarket data API."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

import config

logger = logging.getLogger(__name__)

# Keys the data API has been seen to wrap row arrays under, in lookup order
ENVELOPE_KEYS = ("data", "results", "positions")
ARRAY = "array"
UNRECOGNIZED = "unrecognized"


class RequestError(Exception):
    """A GET that did not yield usable JSON. ``status`` is None for transport errors."""

    def __init__(self, path: str, status: Optional[int] = None, detail: str = ""):
        self.path = path
        self.status = status
        self.detail = detail
        label = f"API {status}" if status is not None else "API request failed"
        super().__init__(f"{label}: {path}" + (f" ({detail})" if detail else ""))


@dataclass(frozen=True)
class DecodedRows:
    """Result of unwrapping a response body into a row list."""

    rows: List[Any] = field(default_factory=list)
    shape: str = UNRECOGNIZED

    @property
    def recognized(self) -> bool:
        return self.shape != UNRECOGNIZED


def decode_rows(payload: Any) -> DecodedRows:
    """Normalize a bare array or a known envelope to a row list. Never raises."""
    if isinstance(payload, list):
        return DecodedRows(payload, ARRAY)
    if isinstance(payload, dict):
        for key in ENVELOPE_KEYS:
            if isinstance(payload.get(key), list):
                return DecodedRows(payload[key], key)
    return DecodedRows()


class AsyncDataClient:
    """Async HTTP client with a token-bucket rate limit shared by all tasks.

    Everything runs on one event loop, so the bucket needs no lock: a task
    that finds it empty sleeps cooperatively while the others proceed.
    """

    def __init__(
        self,
        base_url: str = config.DATA_API_BASE,
        requests_per_second: float = config.RATE_LIMIT_REQUESTS_PER_SECOND,
        burst: int = config.RATE_LIMIT_BURST,
        timeout: float = config.HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.rps = requests_per_second
        self.burst = burst
        self.tokens = float(burst)
        self.last_refill = time.monotonic()
        self.request_count = 0
        self.session = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/json",
                "User-Agent": config.USER_AGENT,
            },
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self.session.aclose()

    def _refill_tokens(self):
        now = time.monotonic()
        elapsed = now - self.last_refill
        self.tokens = min(self.burst, self.tokens + elapsed * self.rps)
        self.last_refill = now

    async def _wait_for_token(self):
        self._refill_tokens()
        while self.tokens < 1.0:
            await asyncio.sleep((1.0 - self.tokens) / self.rps)
            self._refill_tokens()
        self.tokens -= 1.0

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``path`` and return the parsed JSON body.

        Raises RequestError on a non-2xx status, a transport failure or a
        body that is not JSON. No retries.
        """
        await self._wait_for_token()
        self.request_count += 1
        try:
            resp = await self.session.get(path, params=params)
        except httpx.HTTPError as e:
            logger.debug("GET %s failed: %s", path, e)
            raise RequestError(path, detail=str(e)) from e

        if resp.status_code >= 400:
            logger.debug("GET %s -> %d", path, resp.status_code)
            raise RequestError(path, status=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise RequestError(path, status=resp.status_code, detail="invalid JSON") from e
