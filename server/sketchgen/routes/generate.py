# ─────────────────────────────────────────────────────────────────────────────
# /api/generate-sketch — SVG sketch generation endpoint (THIN)
# ─────────────────────────────────────────────────────────────────────────────
# The body is read by hand after the rate-limit dependency has admitted the
# client. A pydantic body parameter would be parsed before any dependency
# runs and reject malformed bodies ahead of the limiter.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import APIRouter, Depends, Request

from sketchgen.config import Settings
from sketchgen.dependencies import enforce_rate_limit, get_settings_dep, get_sketch_service
from sketchgen.schemas import (
    ApiInfoResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
)
from sketchgen.services.sketch_service import SketchService
from sketchgen.validation import prompt_from_body

router = APIRouter()

API_VERSION = "1.0.0"


@router.post(
    "/api/generate-sketch",
    response_model=GenerateResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": GenerateRequest.model_json_schema()}},
        }
    },
)
async def generate_sketch(
    request: Request,
    client_key: str = Depends(enforce_rate_limit),
    service: SketchService = Depends(get_sketch_service),
) -> GenerateResponse:
    """Generate an SVG sketch from a text description.

    Validation and error mapping live in the service and the exception
    handlers. This endpoint is just wiring.
    """
    raw_prompt = prompt_from_body(await request.body())
    return await service.generate(raw_prompt, client_key)


@router.get("/api/generate-sketch", response_model=ApiInfoResponse)
async def generate_sketch_info(
    settings: Settings = Depends(get_settings_dep),
) -> ApiInfoResponse:
    """Describe the generation endpoint."""
    window = int(settings.rate_limit_window_seconds)
    return ApiInfoResponse(
        message="AI Sketch Generator API",
        version=API_VERSION,
        endpoints={
            "POST": "/api/generate-sketch",
            "body": '{ "prompt": "your sketch description" }',
        },
        rate_limit=f"{settings.rate_limit_max_requests} requests per {window} seconds",
    )
