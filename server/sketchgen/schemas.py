# ─────────────────────────────────────────────────────────────────────────────
# Request / Response Schemas
# ─────────────────────────────────────────────────────────────────────────────


from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """Body of POST /api/generate-sketch.

    ``prompt`` is deliberately untyped: type and length checks happen in
    normalize_prompt() so they map onto the service's own error codes.
    """

    prompt: Any = None


class GenerateResponse(BaseModel):
    document: str = Field(description="Well-formed SVG document")
    prompt: str = Field(description="Trimmed prompt the sketch was generated from")
    generated_at: datetime = Field(serialization_alias="generatedAt")
    model: str = "gemini"


class ErrorResponse(BaseModel):
    error: str
    code: str


class ApiInfoResponse(BaseModel):
    message: str
    version: str
    endpoints: dict[str, str]
    rate_limit: str


class LivenessResponse(BaseModel):
    status: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    service: str
    version: str
    environment: str
    gemini_configured: bool
    uptime_seconds: float
