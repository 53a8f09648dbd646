# ─────────────────────────────────────────────────────────────────────────────
# FastAPI Application Factory + Lifespan
# ─────────────────────────────────────────────────────────────────────────────
# Entrypoint: uvicorn sketchgen.main:create_app --factory --host 0.0.0.0 --port 8080
# The --factory flag tells uvicorn to call create_app() for the app instance.
# ─────────────────────────────────────────────────────────────────────────────

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sketchgen.config import Settings, get_settings
from sketchgen.exceptions import register_exception_handlers
from sketchgen.logging_config import configure_logging
from sketchgen.middleware import REQUEST_ID_HEADER, RequestContextMiddleware
from sketchgen.providers.base import GenerationProvider
from sketchgen.providers.gemini import GeminiProvider
from sketchgen.rate_limit import RateLimiter
from sketchgen.routes import generate, health
from sketchgen.services.sketch_service import SketchService

logger = structlog.get_logger(__name__)


def _configure_otel(exporter_type: str) -> None:
    """Configure OpenTelemetry tracing.

    Supports "console" for dev. No-op if the exporter type is unknown.
    """
    if exporter_type != "console":
        logger.warning("unknown_otel_exporter", exporter=exporter_type)
        return

    from opentelemetry import trace
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

    provider = TracerProvider()
    provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    logger.info("otel_configured", exporter=exporter_type)


def init_app_state(
    app: FastAPI,
    settings: Settings,
    provider: GenerationProvider | None = None,
    rate_limiter: RateLimiter | None = None,
) -> SketchService:
    """Create the pipeline objects and store them in app.state.

    Called from lifespan; tests call it directly (ASGITransport does not
    run lifespan) to substitute a fake provider or limiter.
    """
    if provider is None:
        provider = GeminiProvider(settings.gemini_api_key, model=settings.gemini_model)
    if rate_limiter is None:
        rate_limiter = RateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )

    service = SketchService(provider, settings)

    app.state.settings = settings
    app.state.rate_limiter = rate_limiter
    app.state.sketch_service = service
    return service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown lifecycle.

    All stateful objects (provider, rate limiter, service) are created here
    and stored in app.state for injection via Depends().
    """
    settings = get_settings()

    if settings.otel_exporter:
        _configure_otel(settings.otel_exporter)

    service = init_app_state(app, settings)
    if service.provider.is_configured:
        logger.info("provider_configured", provider=service.provider.name)
    else:
        # Serve anyway: /api/health reports it and generation fails with SERVICE_ERROR
        logger.error("provider_not_configured", provider=service.provider.name)

    yield


def _parse_origins(allowed_origins: str) -> list[str]:
    """Parse comma-separated origin string into a list.

    Returns ``["*"]`` if the input is empty (development mode).
    Strips whitespace from each origin.
    """
    if not allowed_origins.strip():
        return ["*"]
    return [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """Application factory. Invoked by: uvicorn sketchgen.main:create_app --factory

    The --factory flag tells uvicorn to call this function to get the app,
    rather than importing a module-level variable. This avoids side effects
    at import time and makes testing cleaner.
    """
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="AI Sketch Generator",
        description="Text-to-SVG sketch generation server",
        version=generate.API_VERSION,
        lifespan=lifespan,
    )

    # ── Middleware stack ─────────────────────────────────────────────────────
    # Starlette applies middleware in reverse order of add_middleware calls.
    # Execution order for an incoming request: CORS → RequestContext → route.
    app.add_middleware(RequestContextMiddleware)

    origins = _parse_origins(settings.allowed_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )

    # ── Exception handlers ───────────────────────────────────────────────────
    register_exception_handlers(app)

    # ── Routes ───────────────────────────────────────────────────────────────
    app.include_router(health.router, tags=["health"])
    app.include_router(generate.router, tags=["generate"])

    return app
