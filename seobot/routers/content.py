from fastapi import APIRouter
from fastapi.responses import JSONResponse
import logging

from seobot.models.content import ArticleRequest, ArticleResult, OutlineRequest
from seobot.services import content_service
from seobot.services.errors import ServiceError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/content")


@router.post("/outline")
async def outline(body: OutlineRequest):
    """Ask the LLM for an SEO article outline for a keyword."""
    keyword = (body.keyword or "").strip()
    if not keyword:
        return JSONResponse({"error": "keyword is required"}, status_code=400)

    logger.info(f"Generating outline for '{keyword}' ({body.language})")
    try:
        return await content_service.generate_outline(keyword, body.language)
    except ServiceError as e:
        logger.error(f"Outline generation failed: {e.message}")
        return JSONResponse({"error": e.message}, status_code=e.status_code)
    except Exception as e:
        logger.exception("Outline generation failed")
        return JSONResponse({"error": str(e) or "Internal error"}, status_code=500)


@router.post("/generate", response_model=ArticleResult)
async def generate(body: ArticleRequest):
    """Write a full article from an outline and score it."""
    keyword = (body.keyword or "").strip()
    title = (body.title or "").strip()
    if not keyword or not title or body.outline is None:
        return JSONResponse(
            {"error": "keyword, title, and outline are required"}, status_code=400
        )

    outline = [section.model_dump(by_alias=True) for section in body.outline]
    logger.info(f"Generating article '{title}' for '{keyword}'")
    try:
        return await content_service.generate_article(
            keyword, title, outline, body.language
        )
    except ServiceError as e:
        logger.error(f"Article generation failed: {e.message}")
        return JSONResponse({"error": e.message}, status_code=e.status_code)
    except Exception as e:
        logger.exception("Article generation failed")
        return JSONResponse({"error": str(e) or "Internal error"}, status_code=500)
