from fastapi import APIRouter
from fastapi.responses import JSONResponse
import logging

from seobot.models.publish import DevtoRequest, MarkdownRequest, TweetRequest, WordPressRequest
from seobot.services import publish_service
from seobot.services.errors import ServiceError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/publish")


def _failure(channel: str, e: Exception) -> JSONResponse:
    if isinstance(e, ServiceError):
        logger.error(f"Publishing to {channel} failed: {e.message}")
        return JSONResponse({"error": e.message}, status_code=e.status_code)
    logger.exception(f"Publishing to {channel} failed")
    return JSONResponse({"error": str(e) or "Unknown error"}, status_code=500)


@router.post("/devto")
async def publish_devto(body: DevtoRequest):
    if not body.api_key:
        return JSONResponse({"error": "Dev.to API key is required"}, status_code=400)
    if not body.title or not body.content:
        return JSONResponse({"error": "Title and content are required"}, status_code=400)

    try:
        return await publish_service.publish_devto(
            body.title, body.content, body.api_key, body.tags, body.published
        )
    except Exception as e:
        return _failure("Dev.to", e)


@router.post("/wordpress")
async def publish_wordpress(body: WordPressRequest):
    if not body.site_url or not body.username or not body.password:
        return JSONResponse(
            {"error": "WordPress site URL, username, and application password are required"},
            status_code=400,
        )
    if not body.title or not body.content:
        return JSONResponse({"error": "Title and content are required"}, status_code=400)

    try:
        return await publish_service.publish_wordpress(
            body.title, body.content, body.site_url, body.username, body.password, body.status
        )
    except Exception as e:
        return _failure("WordPress", e)


@router.post("/twitter")
async def publish_twitter(body: TweetRequest):
    if not body.text:
        return JSONResponse({"error": "Tweet text is required"}, status_code=400)
    if len(body.text) > publish_service.MAX_TWEET_LENGTH:
        return JSONResponse({"error": "Tweet exceeds 280 characters"}, status_code=400)

    try:
        return await publish_service.publish_tweet(body.text)
    except Exception as e:
        return _failure("Twitter", e)


@router.post("/markdown")
async def publish_markdown(body: MarkdownRequest):
    if not body.title or not body.content:
        return JSONResponse({"error": "Title and content are required"}, status_code=400)

    try:
        return publish_service.export_markdown(body.title, body.content, body.output_dir)
    except Exception as e:
        return _failure("Markdown", e)
