"""
Health check endpoints.
"""

from fastapi import APIRouter

from .config import settings
from .models import HealthResponse
from .router import get_catalog

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description="Returns service health status and configuration info"
)
async def health() -> HealthResponse:
    """
    Basic health check endpoint.

    Reports whether the Gemini key is configured and how many templates
    were loaded; it never contacts the remote API.
    """
    return HealthResponse(
        status="ok",
        service=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        model=settings.GEMINI_MODEL,
        api_key_configured=bool(settings.GEMINI_API_KEY),
        templates=len(get_catalog()),
    )


@router.get(
    "/health/live",
    summary="Liveness probe",
    description="Simple check that the service is running"
)
async def liveness():
    return {"status": "alive"}
