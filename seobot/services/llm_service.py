import aiohttp
import asyncio
import logging

from seobot import config
from seobot.services.errors import ServiceError

logger = logging.getLogger(__name__)

LLM_TIMEOUT = 120


async def chat_completion(prompt: str, max_tokens: int = 2000) -> str:
    """Send a single-message chat completion and return the reply text."""
    api_key = config.get_openai_api_key()
    if not api_key:
        raise ServiceError("OPENAI_API_KEY not configured", 500)

    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }
    payload = {
        "model": config.OPENAI_MODEL,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": 0.7,
        "max_tokens": max_tokens,
    }

    timeout = aiohttp.ClientTimeout(total=LLM_TIMEOUT)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(
                config.OPENAI_API_URL, headers=headers, json=payload
            ) as response:
                if response.status >= 400:
                    error = await response.text()
                    logger.error(f"OpenAI API returned {response.status}")
                    raise ServiceError(f"OpenAI API error: {error}", 502)
                data = await response.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise ServiceError(f"OpenAI API error: {str(e)}", 502)

    try:
        content = data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        content = ""
    content = content.strip()
    if not content:
        raise ServiceError("Empty response from AI", 502)
    return content
