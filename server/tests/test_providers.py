# ─────────────────────────────────────────────────────────────────────────────
# Tests — Generation Providers
# ─────────────────────────────────────────────────────────────────────────────

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from sketchgen.exceptions import (
    ErrorKind,
    GenerationError,
    ModelNotFoundError,
    ProviderAuthError,
    QuotaExceededError,
    ServiceConfigurationError,
    ServiceUnavailableError,
)
from sketchgen.providers.errors import classify_provider_error
from sketchgen.providers.gemini import GeminiProvider


class UpstreamError(Exception):
    """Stand-in for an SDK error carrying structured fields."""

    def __init__(self, message: str = "", code: int | None = None, status: str | None = None):
        super().__init__(message)
        self.code = code
        self.status = status


class TestClassifyProviderError:
    @pytest.mark.parametrize(
        "code, expected",
        [
            (401, ProviderAuthError),
            (403, ProviderAuthError),
            (429, QuotaExceededError),
            (404, ModelNotFoundError),
            (500, ServiceUnavailableError),
            (503, ServiceUnavailableError),
        ],
    )
    def test_status_codes(self, code, expected):
        assert isinstance(classify_provider_error(UpstreamError("x", code=code)), expected)

    @pytest.mark.parametrize(
        "status, expected",
        [
            ("RESOURCE_EXHAUSTED", QuotaExceededError),
            ("UNAUTHENTICATED", ProviderAuthError),
            ("NOT_FOUND", ModelNotFoundError),
            ("UNAVAILABLE", ServiceUnavailableError),
        ],
    )
    def test_rpc_statuses(self, status, expected):
        assert isinstance(classify_provider_error(UpstreamError("x", code=400, status=status)), expected)

    @pytest.mark.parametrize(
        "message, expected",
        [
            ("API key not valid. Please pass a valid API key.", ProviderAuthError),
            ("authentication failed", ProviderAuthError),
            ("Quota exceeded for metric generate_content", QuotaExceededError),
            ("rate limit reached", QuotaExceededError),
            ("models/gemini-9 is not found for API version v1beta", ModelNotFoundError),
            ("HTTP 404", ModelNotFoundError),
        ],
    )
    def test_message_fallback(self, message, expected):
        assert isinstance(classify_provider_error(RuntimeError(message)), expected)

    def test_structured_signal_beats_message(self):
        error = classify_provider_error(UpstreamError("quota backend overloaded", code=503))
        assert isinstance(error, ServiceUnavailableError)

    def test_unmapped_code_falls_back_to_message(self):
        error = classify_provider_error(UpstreamError("API key not valid", code=400, status="INVALID_ARGUMENT"))
        assert isinstance(error, ProviderAuthError)

    def test_auth_has_priority_over_quota_keywords(self):
        error = classify_provider_error(RuntimeError("API key exceeded its limit"))
        assert isinstance(error, ProviderAuthError)

    def test_unknown_error_is_generic_and_keeps_reason(self):
        error = classify_provider_error(RuntimeError("socket exploded"))
        assert isinstance(error, GenerationError)
        assert error.kind == ErrorKind.GENERATION_ERROR
        assert error.reason == "socket exploded"
        assert "socket exploded" not in error.message

    def test_provider_error_passes_through(self):
        original = QuotaExceededError("already classified")
        assert classify_provider_error(original) is original


@pytest.fixture
def fake_genai(monkeypatch):
    """Replace google.genai.Client with a mock exposing aio.models.generate_content."""
    generate_content = AsyncMock(return_value=SimpleNamespace(text='<svg viewBox="0 0 800 600"></svg>'))
    client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate_content)))
    factory = MagicMock(return_value=client)
    monkeypatch.setattr("sketchgen.providers.gemini.genai.Client", factory)
    return SimpleNamespace(factory=factory, generate_content=generate_content)


class TestGeminiProvider:
    def test_is_configured(self):
        assert GeminiProvider("key").is_configured
        assert not GeminiProvider("").is_configured

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_client_creation(self, fake_genai):
        provider = GeminiProvider("")
        with pytest.raises(ServiceConfigurationError) as exc_info:
            await provider.generate("a cat")
        assert exc_info.value.kind == ErrorKind.SERVICE_ERROR
        fake_genai.factory.assert_not_called()
        fake_genai.generate_content.assert_not_called()

    @pytest.mark.asyncio
    async def test_sends_instruction_once(self, fake_genai):
        provider = GeminiProvider("key", model="gemini-test")
        text = await provider.generate("a cat wearing sunglasses")

        assert text == '<svg viewBox="0 0 800 600"></svg>'
        fake_genai.factory.assert_called_once_with(api_key="key")
        fake_genai.generate_content.assert_awaited_once()
        kwargs = fake_genai.generate_content.await_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert "a cat wearing sunglasses" in kwargs["contents"]
        assert 'viewBox="0 0 800 600"' in kwargs["contents"]

    @pytest.mark.asyncio
    async def test_client_reused_across_calls(self, fake_genai):
        provider = GeminiProvider("key")
        await provider.generate("one")
        await provider.generate("two")
        fake_genai.factory.assert_called_once()

    @pytest.mark.asyncio
    async def test_empty_response_text(self, fake_genai):
        fake_genai.generate_content.return_value = SimpleNamespace(text=None)
        assert await GeminiProvider("key").generate("a cat") == ""

    @pytest.mark.asyncio
    async def test_upstream_error_classified_without_retry(self, fake_genai):
        fake_genai.generate_content.side_effect = UpstreamError("Resource exhausted", code=429)
        with pytest.raises(QuotaExceededError) as exc_info:
            await GeminiProvider("key").generate("a cat")
        assert exc_info.value.reason == "Resource exhausted"
        assert fake_genai.generate_content.await_count == 1
