import aiohttp
import asyncio
import json
import logging
from typing import List

from seobot.config import SUGGEST_URL, SUGGEST_TIMEOUT

logger = logging.getLogger(__name__)

HEADERS = {"User-Agent": "Mozilla/5.0"}


async def get_suggestions(session: aiohttp.ClientSession, query: str) -> List[str]:
    """Get suggestions from Google Suggest API."""
    try:
        params = {"client": "firefox", "q": query}
        timeout = aiohttp.ClientTimeout(total=SUGGEST_TIMEOUT)
        async with session.get(
            SUGGEST_URL, params=params, headers=HEADERS, timeout=timeout
        ) as response:
            if response.status != 200:
                logger.warning(f"Suggest API returned {response.status} for '{query}'")
                return []
            data = json.loads(await response.text())
            # Firefox client returns [query, [suggestions]]
            if not isinstance(data, list) or len(data) < 2 or not isinstance(data[1], list):
                logger.warning(f"Unexpected suggest payload for '{query}'")
                return []
            return [s for s in data[1] if isinstance(s, str) and s != query]
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.error(f"Error getting suggestions: {str(e)}")
    return []
