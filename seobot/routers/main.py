from fastapi import APIRouter, Request
from fastapi.templating import Jinja2Templates
from fastapi.responses import JSONResponse, Response
import logging
from pathlib import Path
from urllib.parse import quote

from seobot.models.keywords import KeywordRequest, KeywordResult
from seobot.services import keyword_service

logger = logging.getLogger(__name__)
router = APIRouter()

# Templates
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


@router.get("/")
async def home(request: Request):
    return templates.TemplateResponse(request, "index.html")


@router.post("/api/keywords", response_model=KeywordResult)
async def keywords(body: KeywordRequest):
    """Expand a seed keyword through Google Suggest and cluster the results."""
    seed = (body.seed or "").strip()
    if not seed:
        return JSONResponse({"error": "seed keyword is required"}, status_code=400)

    depth = keyword_service.normalize_depth(body.depth)
    logger.info(f"Keyword search for '{seed}' with depth {depth}")

    try:
        return await keyword_service.search_keywords(seed, depth)
    except Exception as e:
        logger.exception(f"Keyword search failed for '{seed}'")
        return JSONResponse({"error": str(e) or "Internal error"}, status_code=500)


@router.post("/api/keywords/export")
async def export_keywords(result: KeywordResult):
    """Download a keyword result as CSV."""
    csv_text = keyword_service.clusters_to_csv(
        [cluster.model_dump() for cluster in result.clusters]
    )
    filename = f"keywords-{quote(result.seed)}.csv"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=csv_text, media_type="text/csv", headers=headers)
