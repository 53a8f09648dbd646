# ─────────────────────────────────────────────────────────────────────────────
# Dependency Injection — FastAPI Depends() providers
# ─────────────────────────────────────────────────────────────────────────────
# State flows: lifespan creates → app.state stores → Depends() injects.
# No global variables. Every dependency is explicit in endpoint signatures.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import Request

from sketchgen.config import Settings
from sketchgen.rate_limit import RateLimiter, client_key_from_headers
from sketchgen.services.sketch_service import SketchService


def get_sketch_service(request: Request) -> SketchService:
    """Inject SketchService into endpoints via Depends()."""
    return request.app.state.sketch_service


def get_settings_dep(request: Request) -> Settings:
    """Inject Settings into endpoints via Depends()."""
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    """Inject the shared RateLimiter into endpoints via Depends()."""
    return request.app.state.rate_limiter


def enforce_rate_limit(request: Request) -> str:
    """Admit the caller or raise RateLimitError; returns the client key.

    Runs before the body is read, so an over-quota client gets 429 even
    when its body is malformed.
    """
    client_key = client_key_from_headers(request.headers)
    get_rate_limiter(request).enforce(client_key)
    return client_key
