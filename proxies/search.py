"""Search proxy: forward a query upstream under a hard timeout."""

import asyncio
import logging

from models import SearchRequest
from upstream.base import UpstreamTimeout
from upstream.client import IntelligenceClient

logger = logging.getLogger(__name__)

# Modal cold start ~20s + OpenAI ~10s
SEARCH_TIMEOUT_SECONDS = 40.0

TIMEOUT_MESSAGE = "Search took too long. The AI might be processing. Please try again."
FAILURE_MESSAGE = "Failed to fetch search results"


async def proxy_search(
    api: IntelligenceClient,
    request: SearchRequest,
    timeout: float = SEARCH_TIMEOUT_SECONDS,
) -> dict:
    """Return the upstream search JSON untouched.

    Raises UpstreamTimeout when the budget runs out; the in-flight request is
    cancelled before raising. Any other upstream failure propagates as
    UpstreamError.
    """
    logger.info('Proxying search request for query: "%s"', request.query)
    try:
        data = await asyncio.wait_for(
            api.search(request.query, limit=request.limit, offset=request.offset),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        logger.error('Search request timed out after %gs for: "%s"', timeout, request.query)
        raise UpstreamTimeout(f"{api.base_url}/api/search", timeout) from e

    logger.info('Successfully proxied search response for: "%s"', request.query)
    return data
