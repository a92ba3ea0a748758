"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from uneventful.api.models.responses import HealthResponse
from uneventful.core.config import API_VERSION, GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if OAuth client credentials are missing.
    """
    oauth_configured = bool(GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET)
    timestamp = datetime.now(timezone.utc).isoformat()

    if oauth_configured:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            oauth_configured=True,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                oauth_configured=False,
                timestamp=timestamp,
                error="Google OAuth client is not configured",
            ).model_dump(),
        )
