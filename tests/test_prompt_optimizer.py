"""
Tests for the Prompt Optimizer.

This module tests:
- Splitting ---TEXT--- / ---JSON--- replies
- DesignSpec validation (layout + colors required)
- The retry loop: rejection, rate limits, credential rotation, exhaustion
"""

import json

import pytest

from dsy_core.ai.errors import NetworkFailure, ParseValidationFailure, RateLimited
from dsy_core.ai.optimizer import (
    OptimizationResult,
    PromptOptimizer,
    parse_optimization_output,
    validate_design_spec,
)
from dsy_core.ai.optimizer.prompt_optimizer import OPTIMIZER_TEMPERATURE
from dsy_core.ai.prompts import PROMPT_OPTIMIZER_SYSTEM_PROMPT
from dsy_core.ai.schemas.assets import Asset, AssetKind

from support import DESIGN_SPEC_JSON, IMAGE_DATA_URI, OPTIMIZED_TEXT, OPTIMIZER_OUTPUT, StubProvider


# Valid text half, JSON half without colors
MISSING_COLORS_OUTPUT = '---TEXT---\nDraft text\n---JSON---\n{"layout": {"type": "landing"}}'


class TestParseOptimizationOutput:
    """Tests for parse_optimization_output."""

    def test_both_sections(self):
        text, data = parse_optimization_output(OPTIMIZER_OUTPUT)

        assert text == OPTIMIZED_TEXT
        assert data == DESIGN_SPEC_JSON

    def test_text_without_marker(self):
        raw = f"Some prose about the page.\n---JSON---\n{json.dumps(DESIGN_SPEC_JSON)}"

        text, data = parse_optimization_output(raw)

        assert text == "Some prose about the page."
        assert data["layout"]["type"] == "landing"

    def test_trailing_prose_after_json(self):
        raw = f"---TEXT---\nHi\n---JSON---\n{json.dumps(DESIGN_SPEC_JSON)}\nHope this helps!"

        _, data = parse_optimization_output(raw)

        assert data == DESIGN_SPEC_JSON

    def test_layout_object_without_markers(self):
        raw = f"Here is the design: {json.dumps(DESIGN_SPEC_JSON)}"

        text, data = parse_optimization_output(raw)

        assert text == raw
        assert data == DESIGN_SPEC_JSON

    def test_no_json(self):
        text, data = parse_optimization_output("Just prose, no structure.")

        assert text == "Just prose, no structure."
        assert data is None


class TestValidateDesignSpec:
    """Tests for validate_design_spec."""

    def test_valid_spec(self):
        spec = validate_design_spec(DESIGN_SPEC_JSON)

        assert spec.layout.columns == 2
        assert spec.colors.primary == "#8b4513"
        assert spec.typography.heading_font == "Playfair Display"
        assert spec.is_dark_theme is False

    @pytest.mark.parametrize("missing", ["layout", "colors"])
    def test_required_fields(self, missing):
        data = {k: v for k, v in DESIGN_SPEC_JSON.items() if k != missing}

        with pytest.raises(ParseValidationFailure, match=missing):
            validate_design_spec(data)

    def test_not_an_object(self):
        with pytest.raises(ParseValidationFailure):
            validate_design_spec(["layout", "colors"])

    def test_unknown_fields_preserved(self):
        spec = validate_design_spec({**DESIGN_SPEC_JSON, "animations": ["fade-in"]})

        assert spec.to_wire()["animations"] == ["fade-in"]

    def test_odd_optional_shapes_are_coerced(self):
        """Only layout and colors can reject a spec; everything else bends."""
        data = {
            "layout": {"type": None, "sections": "hero, menu", "columns": {"desktop": 3}},
            "colors": {"primary": "#8b4513", "background": ["#fff"]},
            "components": ["navbar", {"name": "hero", "align": "center"}, 42],
            "typography": "Inter",
            "spacing": "generous",
            "effects": {"shadow": True},
            "isDarkTheme": "dark",
        }

        spec = validate_design_spec(data)

        assert spec.layout.type == "landing"
        assert spec.layout.sections == ["hero", "menu"]
        assert spec.layout.columns is None
        assert spec.colors.primary == "#8b4513"
        assert spec.colors.background is None
        assert [c.type for c in spec.components] == ["navbar", "hero"]
        assert spec.components[1].attributes["align"] == "center"
        assert spec.typography.body_font == "Inter"
        assert spec.spacing == {"value": "generous"}
        assert spec.effects == []
        assert spec.is_dark_theme is True

    @pytest.mark.parametrize(
        "extra",
        [
            {"components": ["navbar", "hero"]},
            {"typography": "Inter"},
            {"spacing": "generous"},
            {"typography": ["Inter", "Roboto"]},
        ],
    )
    def test_odd_optional_field_alone(self, extra):
        spec = validate_design_spec({**DESIGN_SPEC_JSON, **extra})

        assert spec.colors.primary == "#8b4513"


class TestPromptOptimizer:
    """Tests for PromptOptimizer.optimize."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self):
        provider = StubProvider([OPTIMIZER_OUTPUT])
        optimizer = PromptOptimizer(provider, max_attempts=3)

        result = await optimizer.optimize("bakery landing page")

        assert result.success is True
        assert result.text == OPTIMIZED_TEXT
        assert result.design_spec.colors.accent == "#ffd700"
        assert result.attempts == 1
        assert result.original_prompt == "bakery landing page"
        assert result.credential_used == provider.credentials_used[0]
        assert provider.calls[0]["system_prompt"] == PROMPT_OPTIMIZER_SYSTEM_PROMPT
        assert provider.calls[0]["temperature"] == OPTIMIZER_TEMPERATURE
        assert '"bakery landing page"' in provider.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_loose_optional_fields_succeed_first_attempt(self):
        loose = {**DESIGN_SPEC_JSON, "components": ["navbar", "hero"], "typography": "Inter"}
        raw = f"---TEXT---\n{OPTIMIZED_TEXT}\n---JSON---\n{json.dumps(loose)}"
        provider = StubProvider([raw])

        result = await PromptOptimizer(provider, max_attempts=3).optimize("bakery landing page")

        assert result.success is True
        assert result.attempts == 1
        assert [c.type for c in result.design_spec.components] == ["navbar", "hero"]

    @pytest.mark.asyncio
    async def test_rejected_spec_is_retried_on_another_credential(self):
        """A reply without colors is never success; the retry avoids the same key."""
        provider = StubProvider([MISSING_COLORS_OUTPUT, OPTIMIZER_OUTPUT])
        optimizer = PromptOptimizer(provider, max_attempts=3)

        result = await optimizer.optimize("bakery landing page")

        assert result.success is True
        assert result.attempts == 2
        first, second = provider.credentials_used
        assert first != second

    @pytest.mark.asyncio
    async def test_exhaustion_keeps_partial_text(self):
        provider = StubProvider([MISSING_COLORS_OUTPUT] * 3)
        optimizer = PromptOptimizer(provider, max_attempts=3)

        result = await optimizer.optimize("bakery landing page")

        assert result.success is False
        assert result.design_spec is None
        assert result.text == "Draft text"
        assert result.attempts == 3
        assert result.error.startswith("Failed to extract design JSON after multiple attempts.")
        assert "missing required fields: colors" in result.error
        assert result.raw_output == MISSING_COLORS_OUTPUT

    @pytest.mark.asyncio
    async def test_rate_limit_marks_credential_and_rotates(self):
        provider = StubProvider([lambda credential: RateLimited(credential=credential), OPTIMIZER_OUTPUT])
        optimizer = PromptOptimizer(provider, max_attempts=3)

        result = await optimizer.optimize("bakery landing page")

        limited, served = provider.credentials_used
        assert result.success is True
        assert provider.pool.is_failed(limited)
        assert served != limited
        assert result.credential_used == served

    @pytest.mark.asyncio
    async def test_network_failure_is_retried(self):
        provider = StubProvider([lambda c: NetworkFailure("timed out", credential=c), OPTIMIZER_OUTPUT])

        result = await PromptOptimizer(provider, max_attempts=3).optimize("x")

        assert result.success is True
        assert result.attempts == 2
        assert provider.pool.failed_count == 0

    @pytest.mark.asyncio
    async def test_single_credential_pool_retries_same_key(self):
        provider = StubProvider([MISSING_COLORS_OUTPUT, OPTIMIZER_OUTPUT], keys=["only-key-000000"])

        result = await PromptOptimizer(provider, max_attempts=3).optimize("x")

        assert result.success is True
        assert provider.credentials_used == ["only-key-000000", "only-key-000000"]

    @pytest.mark.asyncio
    async def test_no_credentials_stops_immediately(self):
        provider = StubProvider([OPTIMIZER_OUTPUT], keys=[])

        result = await PromptOptimizer(provider, max_attempts=3).optimize("x")

        assert result.success is False
        assert result.attempts == 1
        assert "No gemini API credentials configured" in result.error
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_images_capped_and_links_referenced(self, link_asset):
        images = [
            Asset(kind=AssetKind.IMAGE, payload=IMAGE_DATA_URI, name=f"shot-{i}.png")
            for i in range(7)
        ]
        provider = StubProvider([OPTIMIZER_OUTPUT])

        result = await PromptOptimizer(provider).optimize("match these", [*images, link_asset])

        assert result.images_analyzed == 5
        assert len(provider.calls[0]["images"]) == 5
        assert provider.calls[0]["images"][0].mime_type == "image/png"
        assert "I have attached 5 reference image(s)" in provider.calls[0]["prompt"]
        assert "https://example.com/inspiration" in provider.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_unexpected_error_never_raises(self):
        provider = StubProvider([RuntimeError("boom")])

        result = await PromptOptimizer(provider).optimize("x")

        assert result.success is False
        assert result.error == "Prompt optimization failed: boom"

    def test_to_dict_omits_credential(self):
        data = OptimizationResult(success=True, credential_used="secret-key-123456").to_dict()

        assert "credential_used" not in data
        assert "secret-key-123456" not in str(data)
