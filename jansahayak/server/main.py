"""
FastAPI Application Entry Point.

Jan Sahayak API - bilingual citizen-assistance conversation engine

Run with:
    uvicorn jansahayak.server.main:app --host 0.0.0.0 --port 8000

Or for development:
    uvicorn jansahayak.server.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import get_settings
from .dependencies import startup_load

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Pre-loads the embedding model and knowledge store on startup to avoid
    cold start delays.
    """
    logger.info("Starting Jan Sahayak API Server...")
    startup_load()

    yield

    logger.info("Shutting down Jan Sahayak API Server...")


def create_app(preload: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
## Jan Sahayak API

A voice-first, bilingual (English / Hindi) assistant for Indian citizens.

### Features

- **Scheme discovery**: hybrid search (vector similarity + BM25) over government schemes
- **Eligibility checks**: deterministic rule evaluation against a citizen profile
- **Civic issue reporting**: structured extraction with targeted clarification questions
- **Complaint tracking**: status lookup by tracking number and follow-up comments
""",
        lifespan=lifespan if preload else None,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health",
            "turn": "/assistant/turn",
        }

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "jansahayak.server.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
