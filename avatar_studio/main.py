"""
Avatar Studio - Main FastAPI Application

Upload a photo, pick a template, and let the Gemini image model render an
avatar; then crop, retouch a region, and download it.

Key features:
- Template + photo composition
- Free-text and hotspot-targeted retouching
- Text-only generation
- Upload validation, crop and download helpers
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .audit import configure_logging, redact_key
from .config import settings
from .health import router as health_router
from .router import get_catalog, router as avatar_router

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("avatar_studio.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A missing key is not fatal: each generation call fails on its own.
    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set. Image generation will not work.")
    else:
        logger.info("GEMINI_API_KEY is set: %s", redact_key(settings.GEMINI_API_KEY))
    logger.info("Template catalog ready: %d templates", len(get_catalog()))
    yield


# Application metadata
app = FastAPI(
    title="Avatar Studio",
    description=(
        "Generate stylized avatars from a photo and a template "
        "with the Gemini image model."
    ),
    version=settings.SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# CORS middleware - tighten in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(health_router)
app.include_router(avatar_router)


# Custom exception handler for consistent error responses
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Return consistent JSON error responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


def _ensure_static_mount() -> None:
    """
    StaticFiles validates the directory at mount time,
    so mount only when the templates directory exists.
    """
    templates_dir = Path(settings.TEMPLATES_DIR)
    if not templates_dir.is_dir():
        logger.warning("Templates directory %s not found; /templates not served", templates_dir)
        return
    for route in app.router.routes:
        if getattr(route, "name", None) == "templates":
            return
    app.mount("/templates", StaticFiles(directory=str(templates_dir)), name="templates")


_ensure_static_mount()
