import aiohttp
import asyncio
import base64
import hashlib
import hmac
import json
import logging
import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

from slugify import slugify

from seobot import config
from seobot.services.errors import ServiceError

logger = logging.getLogger(__name__)

DEVTO_URL = "https://dev.to/api/articles"
TWITTER_URL = "https://api.x.com/2/tweets"
MAX_TWEET_LENGTH = 280
PUBLISH_TIMEOUT = 30
TWITTER_KEYS = ("consumer_key", "consumer_secret", "access_token", "access_token_secret")
SLUG_PATTERN = r"[^a-z0-9\u4e00-\u9fff]+"


async def _post_json(
    url: str,
    payload: Dict,
    headers: Optional[Dict] = None,
) -> Tuple[int, Dict]:
    """POST ``payload`` as JSON and return the status and decoded body."""
    timeout = aiohttp.ClientTimeout(total=PUBLISH_TIMEOUT)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(url, json=payload, headers=headers) as response:
                text = await response.text()
                try:
                    data = json.loads(text) if text else {}
                except ValueError:
                    data = {"message": text}
                return response.status, data if isinstance(data, dict) else {}
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"POST {url} failed: {str(e)}")
        raise ServiceError(f"Failed to reach {url}: {str(e)}", 502)


async def publish_devto(
    title: str, content: str, api_key: str, tags: List[str] = None, published: bool = False
) -> Dict:
    """Create an article on Dev.to."""
    payload = {
        "article": {
            "title": title,
            "body_markdown": content,
            "published": published,
            "tags": tags or [],
        }
    }
    status, data = await _post_json(DEVTO_URL, payload, headers={"api-key": api_key})
    if status >= 400:
        raise ServiceError(data.get("error") or "Failed to publish to Dev.to", status)
    logger.info(f"Published '{title}' to Dev.to as {data.get('id')}")
    return {"url": data.get("url"), "id": data.get("id"), "published": data.get("published")}


async def publish_wordpress(
    title: str, content: str, site_url: str, username: str, password: str, status: str = "draft"
) -> Dict:
    """Create a post through the WordPress REST API using an application password."""
    url = f"{site_url.rstrip('/')}/wp-json/wp/v2/posts"
    payload = {"title": title, "content": content, "status": status}
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    headers = {"Authorization": f"Basic {token}"}
    code, data = await _post_json(url, payload, headers=headers)
    if code >= 400:
        raise ServiceError(data.get("message") or "Failed to publish to WordPress", code)
    logger.info(f"Published '{title}' to WordPress as {data.get('id')}")
    return {"url": data.get("link"), "id": data.get("id"), "status": data.get("status")}


def percent_encode(value: str) -> str:
    """RFC 3986 encoding as required by OAuth 1.0a."""
    return quote(value, safe="~-._")


def oauth_signature(
    method: str,
    url: str,
    params: Dict[str, str],
    consumer_secret: str,
    token_secret: str,
) -> str:
    sorted_params = "&".join(
        f"{percent_encode(k)}={percent_encode(params[k])}" for k in sorted(params)
    )
    base_string = "&".join(
        [method, percent_encode(url), percent_encode(sorted_params)]
    )
    signing_key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"
    digest = hmac.new(signing_key.encode(), base_string.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def oauth_header(method: str, url: str, credentials: Dict[str, str]) -> str:
    params = {
        "oauth_consumer_key": credentials["consumer_key"],
        "oauth_nonce": secrets.token_hex(16),
        "oauth_signature_method": "HMAC-SHA1",
        "oauth_timestamp": str(int(time.time())),
        "oauth_token": credentials["access_token"],
        "oauth_version": "1.0",
    }
    params["oauth_signature"] = oauth_signature(
        method,
        url,
        params,
        credentials["consumer_secret"],
        credentials["access_token_secret"],
    )
    return "OAuth " + ", ".join(
        f'{percent_encode(k)}="{percent_encode(params[k])}"' for k in sorted(params)
    )


def load_twitter_credentials(path: Path = None) -> Dict[str, str]:
    path = path or config.get_twitter_credentials_file()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            credentials = json.load(fh)
    except (OSError, ValueError) as e:
        logger.error(f"Could not load Twitter credentials from {path}: {str(e)}")
        raise ServiceError("Twitter credentials not found on server", 500)

    if not isinstance(credentials, dict) or any(k not in credentials for k in TWITTER_KEYS):
        logger.error(f"Incomplete Twitter credentials in {path}")
        raise ServiceError("Twitter credentials not found on server", 500)
    return credentials


async def publish_tweet(text: str) -> Dict:
    """Post a tweet through the X API v2 with OAuth 1.0a user context."""
    credentials = load_twitter_credentials()
    headers = {"Authorization": oauth_header("POST", TWITTER_URL, credentials)}
    status, data = await _post_json(TWITTER_URL, {"text": text}, headers=headers)
    if status >= 400:
        raise ServiceError(data.get("detail") or data.get("title") or "Failed to tweet", status)
    tweet_id = (data.get("data") or {}).get("id")
    logger.info(f"Posted tweet {tweet_id}")
    return {"id": tweet_id, "url": f"https://x.com/i/status/{tweet_id}"}


def slugify_title(title: str) -> str:
    return slugify(title, allow_unicode=True, regex_pattern=SLUG_PATTERN)


def export_markdown(title: str, content: str, output_dir: str = None) -> Dict:
    """Write the article with YAML front matter to ``<output_dir>/<slug>.md``."""
    directory = Path(output_dir).expanduser() if output_dir else config.get_export_dir()
    directory.mkdir(parents=True, exist_ok=True)

    filename = f"{slugify_title(title)}.md"
    file_path = directory / filename

    date = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    escaped_title = title.replace('"', '\\"')
    frontmatter = f'---\ntitle: "{escaped_title}"\ndate: "{date}"\n---\n\n'
    file_path.write_text(frontmatter + content, encoding="utf-8")

    logger.info(f"Exported '{title}' to {file_path}")
    return {"path": str(file_path), "filename": filename}
