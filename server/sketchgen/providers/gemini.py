# ─────────────────────────────────────────────────────────────────────────────
# Gemini Provider — google-genai client for SVG sketch text
# ─────────────────────────────────────────────────────────────────────────────


import time

import structlog
from google import genai
from pydantic import SecretStr

from sketchgen.exceptions import ServiceConfigurationError
from sketchgen.pipeline.prompt_templates import build_sketch_instruction
from sketchgen.providers.base import GenerationProvider
from sketchgen.providers.errors import classify_provider_error

logger = structlog.get_logger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiProvider(GenerationProvider):
    """Gemini Developer API adapter.

    The SDK client is created lazily on the first call so a missing key
    never costs a network round-trip. One ``generate_content`` call per
    request, no retries.
    """

    name = "gemini"

    def __init__(self, api_key: SecretStr | str, model: str = DEFAULT_MODEL) -> None:
        if isinstance(api_key, str):
            api_key = SecretStr(api_key)
        self._api_key = api_key
        self.model = model
        self._client: genai.Client | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key.get_secret_value())

    def _genai_client(self) -> genai.Client:
        if not self.is_configured:
            raise ServiceConfigurationError("GEMINI_API_KEY is not configured")
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key.get_secret_value())
        return self._client

    async def generate(self, prompt: str) -> str:
        client = self._genai_client()
        instruction = build_sketch_instruction(prompt)

        t0 = time.perf_counter()
        try:
            resp = await client.aio.models.generate_content(
                model=self.model,
                contents=instruction,
            )
        except Exception as e:
            error = classify_provider_error(e)
            logger.error(
                "provider_error",
                provider=self.name,
                model=self.model,
                code=error.kind.value,
                reason=error.reason,
            )
            raise error from e

        text = resp.text or ""
        logger.info(
            "provider_response",
            provider=self.name,
            model=self.model,
            chars=len(text),
            time_ms=round((time.perf_counter() - t0) * 1000, 1),
        )
        return text
