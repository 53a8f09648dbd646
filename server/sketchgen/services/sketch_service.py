# ─────────────────────────────────────────────────────────────────────────────
# Sketch Service — request gating + generation orchestration
# ─────────────────────────────────────────────────────────────────────────────
# Endpoints delegate here once the client has been admitted by the rate
# limiter dependency. This owns:
#   - Prompt validation
#   - Provider configuration check (fail fast, no network call)
#   - Provider call → SVG extraction
#   - Final output check
# Every failure is raised as a SketchError; exception handlers render it.
# ─────────────────────────────────────────────────────────────────────────────


import time
from datetime import datetime, timezone

import structlog
from opentelemetry import trace

from sketchgen.config import Settings
from sketchgen.exceptions import InvalidOutputError, ServiceConfigurationError
from sketchgen.pipeline.svg_extractor import extract_svg
from sketchgen.providers.base import GenerationProvider
from sketchgen.schemas import GenerateResponse
from sketchgen.validation import normalize_prompt

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

_LOG_PROMPT_CHARS = 50


class SketchService:
    """Validate → configuration check → provider → extractor.

    The first failing stage short-circuits. Once the provider returns,
    extraction cannot fail, so the only remaining failure is the final
    ``<svg`` check.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        settings: Settings,
    ) -> None:
        self._provider = provider
        self._settings = settings

    @property
    def provider(self) -> GenerationProvider:
        return self._provider

    async def generate(self, raw_prompt: object, client_key: str) -> GenerateResponse:
        with tracer.start_as_current_span("generate_sketch") as span:
            span.set_attribute("client_key", client_key)

            prompt = normalize_prompt(
                raw_prompt,
                min_length=self._settings.prompt_min_length,
                max_length=self._settings.prompt_max_length,
            )
            span.set_attribute("prompt_length", len(prompt))

            if not self._provider.is_configured:
                logger.error("provider_not_configured", provider=self._provider.name)
                raise ServiceConfigurationError(f"{self._provider.name} credential is not configured")

            logger.info(
                "sketch_generating",
                client=client_key,
                prompt=prompt[:_LOG_PROMPT_CHARS],
            )
            start = time.perf_counter()

            with tracer.start_as_current_span("provider_call"):
                raw_text = await self._provider.generate(prompt)

            with tracer.start_as_current_span("extract_svg"):
                document = extract_svg(raw_text)

            if "<svg" not in document:
                logger.error("sketch_invalid_output", preview=document[:100])
                raise InvalidOutputError()

            elapsed = int((time.perf_counter() - start) * 1000)
            span.set_attribute("latency_ms", elapsed)
            logger.info(
                "sketch_generated",
                client=client_key,
                chars=len(document),
                time_ms=elapsed,
            )

            return GenerateResponse(
                document=document,
                prompt=prompt,
                generated_at=datetime.now(timezone.utc),
                model=self._provider.name,
            )
