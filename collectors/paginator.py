"""Fetch-until-exhausted pagination over the data API's list endpoints."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import config
from collectors.api_client import RequestError, decode_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointLimits:
    page_size: int
    max_offset: int

    @property
    def max_requests(self) -> int:
        return self.max_offset // self.page_size + 1


ENDPOINTS: Dict[str, EndpointLimits] = {
    path: EndpointLimits(page_size, max_offset)
    for path, (page_size, max_offset) in config.ENDPOINT_LIMITS.items()
}


@dataclass
class PageResult:
    rows: List[Any] = field(default_factory=list)
    requests: int = 0
    error: Optional[RequestError] = None

    @property
    def failed(self) -> bool:
        """True when the first page errored, so the endpoint yielded nothing."""
        return self.error is not None and self.requests == 1


async def fetch_all_pages(client, path: str, address: str,
                          limits: EndpointLimits) -> PageResult:
    """Collect every row of one endpoint for ``address``.

    Pages through offsets 0, page_size, ... up to max_offset inclusive and
    stops on the first short page; an empty final page (row count an exact
    multiple of page_size) is a normal end. A failed request or an
    unrecognized body ends the loop with whatever has accumulated. Rows are
    kept in server order.
    """
    result = PageResult()
    offset = 0

    while offset <= limits.max_offset:
        params = {"user": address, "limit": limits.page_size, "offset": offset}
        result.requests += 1
        try:
            payload = await client.get_json(f"/{path}", params=params)
        except RequestError as e:
            logger.debug("%s: stopping at offset %d after error: %s", path, offset, e)
            result.error = e
            break

        decoded = decode_rows(payload)
        if not decoded.recognized:
            logger.debug("%s: unrecognized response shape at offset %d", path, offset)
            break

        result.rows.extend(decoded.rows)

        if len(decoded.rows) < limits.page_size:
            break

        offset += limits.page_size

    logger.debug("%s: %d rows in %d request(s)", path, len(result.rows), result.requests)
    return result
