"""
Sale Planner API - Main Application.

FastAPI application serving the planning timeline: placement checks during a
drag, cascading move plans, atomic commits and duplicate previews.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import __version__
from api.models import ErrorResponse
from config import get_cors_origins, get_horizon_start
from domain.platform import PlatformNotFoundError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Sale Planner API",
    description="REST API for validating and scheduling discount sales across platforms",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Origins come from CORS_ALLOW_ORIGINS; unset allows all (local development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(PlatformNotFoundError)
def platform_not_found(request: Request, exc: PlatformNotFoundError):
    """Unknown platforms are a 404 wherever they surface."""
    logger.info("Unknown platform %s on %s", exc.platform_id, request.url.path)
    body = ErrorResponse(error="Not found", detail=str(exc), status_code=404)
    return JSONResponse(status_code=404, content=body.model_dump())


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status, version and the configured timeline start.
    """
    horizon = get_horizon_start()
    return {
        "status": "healthy",
        "version": __version__,
        "service": "sale-planner-api",
        "horizon_start": horizon.isoformat() if horizon else None,
    }


@app.get("/", tags=["Root"])
def root():
    return {
        "message": "Sale Planner API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


from api.routers import sales  # noqa: E402

app.include_router(sales.router, prefix="/api/v1", tags=["Sales"])
