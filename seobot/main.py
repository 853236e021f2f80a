from fastapi import FastAPI
import uvicorn
from fastapi.staticfiles import StaticFiles
import logging
from pathlib import Path

from seobot.config import HOST, LOG_LEVEL, PORT
from seobot.routers import content, main, publish, seo

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="SEOBot")

# Mount static files
app.mount(
    "/static",
    StaticFiles(directory=str(Path(__file__).resolve().parent / "static")),
    name="static",
)

# Include routers
app.include_router(main.router)
app.include_router(seo.router)
app.include_router(content.router)
app.include_router(publish.router)



def run():
    """Serve the dashboard with uvicorn."""
    uvicorn.run("seobot.main:app", host=HOST, port=PORT)


__all__ = ["app", "run"]

if __name__ == "__main__":
    run()
