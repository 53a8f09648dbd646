# ─────────────────────────────────────────────────────────────────────────────
# Tests — Sketch Service (pipeline ordering + short-circuits)
# ─────────────────────────────────────────────────────────────────────────────

import pytest

from sketchgen.exceptions import (
    ErrorKind,
    InvalidOutputError,
    PromptTooShortError,
    ServiceConfigurationError,
)
from sketchgen.pipeline.svg_extractor import is_valid_svg


class TestSketchService:
    @pytest.mark.asyncio
    async def test_success(self, service, fake_provider):
        result = await service.generate("  a cat wearing sunglasses  ", "1.2.3.4")

        assert result.prompt == "a cat wearing sunglasses"
        assert is_valid_svg(result.document)
        assert result.model == "fake"
        assert result.generated_at.tzinfo is not None
        assert fake_provider.calls == ["a cat wearing sunglasses"]

    @pytest.mark.asyncio
    async def test_missing_credential_skips_provider(self, service, fake_provider):
        fake_provider.configured = False
        with pytest.raises(ServiceConfigurationError) as exc_info:
            await service.generate("a cat wearing sunglasses", "1.2.3.4")
        assert exc_info.value.kind == ErrorKind.SERVICE_ERROR
        assert exc_info.value.status_code == 500
        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_validation_runs_before_configuration_check(self, service, fake_provider):
        fake_provider.configured = False
        with pytest.raises(PromptTooShortError):
            await service.generate("ab", "1.2.3.4")

    @pytest.mark.asyncio
    async def test_provider_prose_becomes_fallback(self, service, fake_provider):
        fake_provider.response = "I cannot draw that, sorry."
        result = await service.generate("a cat", "k")
        assert is_valid_svg(result.document)
        assert "I cannot draw that, sorry." in result.document

    @pytest.mark.asyncio
    async def test_output_without_svg_root_rejected(self, service, monkeypatch):
        monkeypatch.setattr(
            "sketchgen.services.sketch_service.extract_svg", lambda raw: "<png/>"
        )
        with pytest.raises(InvalidOutputError) as exc_info:
            await service.generate("a cat", "k")
        assert exc_info.value.kind == ErrorKind.INVALID_OUTPUT
