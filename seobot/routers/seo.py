from fastapi import APIRouter
from fastapi.responses import JSONResponse
import logging

from seobot.models.seo import AnalyzeResult, AuditResult, UrlRequest
from seobot.services import seo_service
from seobot.services.errors import ServiceError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api")


@router.post("/analyze", response_model=AnalyzeResult)
async def analyze(body: UrlRequest):
    """Run the basic on-page checks for a URL."""
    if not body.url:
        return JSONResponse({"error": "URL is required"}, status_code=400)

    logger.info(f"Analyzing {body.url}")
    try:
        return await seo_service.analyze_url(body.url)
    except ServiceError as e:
        logger.error(f"Analysis failed for {body.url}: {e.message}")
        return JSONResponse({"error": e.message}, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Analysis failed for {body.url}")
        return JSONResponse({"error": str(e) or "Failed to analyze URL"}, status_code=500)


@router.post("/audit", response_model=AuditResult)
async def audit(body: UrlRequest):
    """Run the full technical audit for a URL."""
    if not body.url:
        return JSONResponse({"error": "URL is required"}, status_code=400)

    logger.info(f"Auditing {body.url}")
    try:
        return await seo_service.audit_url(body.url)
    except ServiceError as e:
        logger.error(f"Audit failed for {body.url}: {e.message}")
        return JSONResponse({"error": e.message}, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Audit failed for {body.url}")
        return JSONResponse({"error": str(e) or "Failed to audit URL"}, status_code=500)
