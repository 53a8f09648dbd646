# ─────────────────────────────────────────────────────────────────────────────
# Error taxonomy + FastAPI Exception Handlers
# ─────────────────────────────────────────────────────────────────────────────
# Every failure leaving the service is a SketchError with a stable ErrorKind.
# The user-facing message is fixed per kind; diagnostics go to the logs only.
# ─────────────────────────────────────────────────────────────────────────────


from enum import StrEnum

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class ErrorKind(StrEnum):
    """Machine-readable error codes returned as ``code`` in error bodies."""

    RATE_LIMIT = "RATE_LIMIT"
    INVALID_INPUT = "INVALID_INPUT"
    PROMPT_TOO_SHORT = "PROMPT_TOO_SHORT"
    PROMPT_TOO_LONG = "PROMPT_TOO_LONG"
    SERVICE_ERROR = "SERVICE_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    MODEL_NOT_FOUND = "MODEL_NOT_FOUND"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INVALID_OUTPUT = "INVALID_OUTPUT"
    GENERATION_ERROR = "GENERATION_ERROR"


# ── Exception hierarchy ──────────────────────────────────────────────────────


class SketchError(Exception):
    """Base exception for all sketch pipeline errors."""

    kind: ErrorKind = ErrorKind.GENERATION_ERROR
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class RateLimitError(SketchError):
    """Raised when a client has used up its request window."""

    kind = ErrorKind.RATE_LIMIT
    status_code = 429

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__("Rate limit exceeded. Please try again in a minute.")


class InvalidInputError(SketchError):
    kind = ErrorKind.INVALID_INPUT
    status_code = 400

    def __init__(self):
        super().__init__("Prompt is required and must be a string")


class PromptTooShortError(SketchError):
    kind = ErrorKind.PROMPT_TOO_SHORT
    status_code = 400

    def __init__(self, min_length: int):
        self.min_length = min_length
        super().__init__(f"Prompt must be at least {min_length} characters long")


class PromptTooLongError(SketchError):
    kind = ErrorKind.PROMPT_TOO_LONG
    status_code = 400

    def __init__(self, max_length: int):
        self.max_length = max_length
        super().__init__(f"Prompt must be at most {max_length} characters long")


class ServiceConfigurationError(SketchError):
    """Raised when the service is missing configuration (e.g. API key)."""

    kind = ErrorKind.SERVICE_ERROR
    status_code = 500

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__("Service configuration error")


class InvalidOutputError(SketchError):
    kind = ErrorKind.INVALID_OUTPUT
    status_code = 500

    def __init__(self):
        super().__init__("Failed to generate valid sketch")


# ── Upstream provider failures ───────────────────────────────────────────────


class ProviderError(SketchError):
    """Base for failures reported by the generation provider.

    ``reason`` holds the upstream diagnostic; it is logged, never returned.
    """

    user_message = "Failed to generate sketch"

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(self.user_message)


class ProviderAuthError(ProviderError):
    kind = ErrorKind.AUTH_ERROR
    status_code = 401
    user_message = "Authentication error. Please check your API key."


class QuotaExceededError(ProviderError):
    kind = ErrorKind.QUOTA_EXCEEDED
    status_code = 429
    user_message = "API quota exceeded. Please try again later."


class ModelNotFoundError(ProviderError):
    kind = ErrorKind.MODEL_NOT_FOUND
    status_code = 404
    user_message = "Model not available. Please try a different model."


class ServiceUnavailableError(ProviderError):
    """Transient upstream failure. Safe for the caller to retry later."""

    kind = ErrorKind.SERVICE_UNAVAILABLE
    status_code = 503
    user_message = "Generation service is temporarily unavailable. Please try again."


class GenerationError(ProviderError):
    kind = ErrorKind.GENERATION_ERROR
    status_code = 500


# ── Handler registration ────────────────────────────────────────────────────


def error_body(exc: SketchError) -> dict[str, str]:
    """Public JSON shape of a failure."""
    return {"error": exc.message, "code": exc.kind.value}


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app.

    Endpoints raise SketchError subclasses; these handlers catch them
    and return structured JSON — no inline try/except in endpoints.
    """

    @app.exception_handler(SketchError)
    async def sketch_error_handler(request: Request, exc: SketchError) -> JSONResponse:
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "sketch_error",
            code=exc.kind.value,
            status_code=exc.status_code,
            error_type=type(exc).__name__,
        )
        headers = None
        if isinstance(exc, RateLimitError):
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to generate sketch",
                "code": ErrorKind.GENERATION_ERROR.value,
            },
        )
