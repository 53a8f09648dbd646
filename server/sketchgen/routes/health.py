# ─────────────────────────────────────────────────────────────────────────────
# Health Check Routes
# ─────────────────────────────────────────────────────────────────────────────
#   /health      → Liveness probe. "Is the process alive?" Near-zero cost.
#   /api/health  → Informational status: provider configured + uptime.
#                  Always 200; not part of the generation contract.
# ─────────────────────────────────────────────────────────────────────────────

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from sketchgen.config import Settings
from sketchgen.dependencies import get_settings_dep, get_sketch_service
from sketchgen.routes.generate import API_VERSION
from sketchgen.schemas import HealthResponse, LivenessResponse
from sketchgen.services.sketch_service import SketchService

router = APIRouter()

_start_time = time.monotonic()


@router.get("/health", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe — is the process alive?

    Keep it absolutely minimal: no deps, no I/O.
    """
    return LivenessResponse(status="ok")


@router.get("/api/health", response_model=HealthResponse)
async def health_status(
    settings: Settings = Depends(get_settings_dep),
    service: SketchService = Depends(get_sketch_service),
) -> HealthResponse:
    """Report whether the provider credential is set and process uptime."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        service="AI Sketch Generator",
        version=API_VERSION,
        environment=settings.environment,
        gemini_configured=service.provider.is_configured,
        uptime_seconds=round(time.monotonic() - _start_time, 3),
    )
