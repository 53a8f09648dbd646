# ─────────────────────────────────────────────────────────────────────────────
# Test Fixtures — shared across all tests
# ─────────────────────────────────────────────────────────────────────────────


import time

import pytest
from httpx import ASGITransport, AsyncClient

from sketchgen.config import Settings
from sketchgen.main import create_app, init_app_state
from sketchgen.providers.base import GenerationProvider
from sketchgen.rate_limit import RateLimiter
from sketchgen.services.sketch_service import SketchService

VALID_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 800 600">'
    '<circle cx="400" cy="300" r="120" fill="none" stroke="#222"/>'
    "</svg>"
)


class FakeProvider(GenerationProvider):
    """Substitutable provider that records every call."""

    name = "fake"

    def __init__(
        self,
        response: str = VALID_SVG,
        error: Exception | None = None,
        configured: bool = True,
    ) -> None:
        self.response = response
        self.error = error
        self.configured = configured
        self.calls: list[str] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, prompt: str) -> str:
        self.calls.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class FakeClock:
    """Manually advanced wall clock, installed over ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing: fake key, console logs."""
    return Settings(
        gemini_api_key="test-key",
        log_json=False,
        log_level="DEBUG",
    )


@pytest.fixture
def fake_clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Freeze time.time() so rate-limit windows only move on advance()."""
    clock = FakeClock()
    monkeypatch.setattr(time, "time", clock)
    return clock


@pytest.fixture
def rate_limiter(fake_clock: FakeClock) -> RateLimiter:
    return RateLimiter(max_requests=10, window_seconds=60)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def service(fake_provider: FakeProvider, test_settings: Settings) -> SketchService:
    return SketchService(fake_provider, test_settings)


@pytest.fixture
def app(test_settings: Settings, fake_provider: FakeProvider, rate_limiter: RateLimiter):
    """App with manually-initialized state (ASGITransport doesn't run lifespan)."""
    app = create_app()
    init_app_state(app, test_settings, provider=fake_provider, rate_limiter=rate_limiter)
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
