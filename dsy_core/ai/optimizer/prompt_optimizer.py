"""
Prompt Optimizer - turns a raw prompt into prose plus a design spec.

Per request:

    START -> CALLING -> VALID_JSON      -> DONE
                     -> INVALID_JSON    -> CALLING (new credential)
                     -> PROVIDER_ERROR  -> CALLING (new credential)
                     (attempt bound)    -> EXHAUSTED

The structured half is mandatory: a response without a valid `layout` +
`colors` spec is never reported as success. The prose half degrades
gracefully, so an exhausted optimization still returns the best text seen.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from pydantic import ValidationError

from dsy_core.ai.attempts import AttemptState
from dsy_core.ai.errors import ConfigurationError, ParseValidationFailure, ProviderError
from dsy_core.ai.monitoring import ai_logger
from dsy_core.ai.prompts.generation_prompts import (
    JSON_MARKER,
    PROMPT_OPTIMIZER_SYSTEM_PROMPT,
    TEXT_MARKER,
    build_optimizer_prompt,
)
from dsy_core.ai.providers.base import AIProvider
from dsy_core.ai.schemas.assets import Asset, image_assets, link_assets
from dsy_core.ai.schemas.design_spec import DesignSpec
from dsy_core.core.config import settings

logger = logging.getLogger("dsy.ai.optimizer")

OPTIMIZER_TEMPERATURE = 0.5
OPTIMIZER_MAX_TOKENS = 4096

_TEXT_SECTION_RE = re.compile(
    re.escape(TEXT_MARKER) + r"\s*(.*?)(?:" + re.escape(JSON_MARKER) + r"|$)",
    re.IGNORECASE | re.DOTALL,
)
_JSON_SECTION_RE = re.compile(re.escape(JSON_MARKER) + r"\s*(.*)$", re.IGNORECASE | re.DOTALL)
_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_LAYOUT_OBJECT_RE = re.compile(r"\{.*\"layout\".*\}", re.DOTALL)


@dataclass
class OptimizationResult:
    """
    Outcome of one optimize call.

    `credential_used` lets the page builder keep generation on a different
    key; it is never serialized.
    """
    success: bool
    text: str = ""
    design_spec: Optional[DesignSpec] = None
    original_prompt: str = ""
    error: Optional[str] = None
    raw_output: str = ""
    attempts: int = 0
    images_analyzed: int = 0
    credential_used: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "text": self.text,
            "design_spec": self.design_spec.to_wire() if self.design_spec else None,
            "original_prompt": self.original_prompt,
            "error": self.error,
            "attempts": self.attempts,
            "images_analyzed": self.images_analyzed,
        }


def _load_json(candidate: str) -> Optional[Any]:
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None


def _decode_leading_object(candidate: str) -> Optional[Any]:
    """Decode the first JSON object, ignoring any prose after it."""
    start = candidate.find("{")
    if start == -1:
        return None
    try:
        data, _ = json.JSONDecoder().raw_decode(candidate[start:])
    except (json.JSONDecodeError, ValueError):
        return None
    return data


def parse_optimization_output(raw_output: str) -> Tuple[str, Optional[Any]]:
    """
    Split a response into (display_text, decoded_json).

    The text is whatever follows ---TEXT--- up to ---JSON---; without a
    text marker it is everything before ---JSON--- (or the whole output).
    The JSON section has code fences stripped; if it does not decode, the
    outermost {...} span mentioning "layout" is tried instead.
    """
    raw_output = raw_output or ""

    text_match = _TEXT_SECTION_RE.search(raw_output)
    json_match = _JSON_SECTION_RE.search(raw_output)

    if text_match and text_match.group(1).strip():
        display_text = text_match.group(1).strip()
    elif json_match:
        display_text = raw_output[: json_match.start()].strip()
    else:
        display_text = raw_output.strip()

    data = None
    if json_match:
        candidate = _JSON_FENCE_RE.sub("", json_match.group(1)).strip()
        candidate = candidate.rstrip("`").strip()
        data = _load_json(candidate)
        if data is None:
            data = _decode_leading_object(candidate)

    if data is None:
        span = _LAYOUT_OBJECT_RE.search(raw_output)
        if span:
            data = _load_json(span.group(0))

    return display_text, data


def validate_design_spec(data: Any) -> DesignSpec:
    """
    Validate decoded JSON as a DesignSpec.

    Raises:
        ParseValidationFailure: not an object, or `layout`/`colors` missing
    """
    if not isinstance(data, dict):
        raise ParseValidationFailure("Design JSON could not be extracted")
    missing = [key for key in ("layout", "colors") if not isinstance(data.get(key), dict)]
    if missing:
        raise ParseValidationFailure(f"Design JSON missing required fields: {', '.join(missing)}")
    try:
        return DesignSpec.model_validate(data)
    except ValidationError as e:
        raise ParseValidationFailure(f"Design JSON invalid: {e.error_count()} error(s)") from e


class PromptOptimizer:
    """
    Two-phase prompt optimization on the vision-capable provider.

    Usage:
        optimizer = PromptOptimizer(provider=gemini_provider)
        result = await optimizer.optimize("dark portfolio hero", assets)
        if result.success:
            print(result.design_spec.colors.primary)
    """

    def __init__(self, provider: AIProvider, max_attempts: Optional[int] = None):
        self.provider = provider
        self.max_attempts = max_attempts or settings.MAX_OPTIMIZATION_ATTEMPTS

    async def optimize(
        self,
        raw_prompt: str,
        assets: Optional[Sequence[Asset]] = None,
    ) -> OptimizationResult:
        """Never raises; failures come back as success=False results."""
        try:
            return await self._optimize(raw_prompt, assets or [])
        except Exception as e:
            logger.exception(f"Prompt optimization crashed: {e}")
            return OptimizationResult(
                success=False,
                original_prompt=raw_prompt,
                error=f"Prompt optimization failed: {e}",
            )

    async def _optimize(self, raw_prompt: str, assets: Sequence[Asset]) -> OptimizationResult:
        images = image_assets(assets)[: self.provider.max_inline_images]
        prompt = build_optimizer_prompt(
            raw_prompt,
            image_count=len(images),
            links=link_assets(assets),
        )

        state = AttemptState()
        while state.attempt < self.max_attempts:
            state = state.next()
            try:
                response = await self.provider.generate(
                    prompt,
                    system_prompt=PROMPT_OPTIMIZER_SYSTEM_PROMPT,
                    temperature=OPTIMIZER_TEMPERATURE,
                    max_tokens=OPTIMIZER_MAX_TOKENS,
                    images=images,
                    exclude=self.provider.rotation_exclude(state.last_credential),
                )
            except ConfigurationError as e:
                ai_logger.log_outcome(operation="optimize", success=False, attempts=state.attempt, error=str(e))
                return OptimizationResult(
                    success=False,
                    original_prompt=raw_prompt,
                    error=str(e),
                    attempts=state.attempt,
                )
            except ProviderError as e:
                ai_logger.log_attempt(
                    operation="optimize",
                    attempt=state.attempt,
                    max_attempts=self.max_attempts,
                    provider=self.provider.name,
                    credential=e.credential,
                    error=str(e),
                )
                state = state.failed(str(e), credential=e.credential)
                continue

            display_text, data = parse_optimization_output(response.content)
            try:
                design_spec = validate_design_spec(data)
            except ParseValidationFailure as e:
                ai_logger.log_attempt(
                    operation="optimize",
                    attempt=state.attempt,
                    max_attempts=self.max_attempts,
                    provider=self.provider.name,
                    credential=response.credential,
                    error=str(e),
                    latency_ms=response.latency_ms,
                )
                state = state.failed(
                    str(e),
                    credential=response.credential,
                    raw_output=response.content,
                    partial_text=display_text,
                )
                continue

            ai_logger.log_attempt(
                operation="optimize",
                attempt=state.attempt,
                max_attempts=self.max_attempts,
                provider=self.provider.name,
                credential=response.credential,
                latency_ms=response.latency_ms,
            )
            ai_logger.log_outcome(operation="optimize", success=True, attempts=state.attempt)
            return OptimizationResult(
                success=True,
                text=display_text,
                design_spec=design_spec,
                original_prompt=raw_prompt,
                raw_output=response.content,
                attempts=state.attempt,
                images_analyzed=len(images),
                credential_used=response.credential,
            )

        error = (
            "Failed to extract design JSON after multiple attempts. Please try again."
            f" Last error: {state.last_error}"
        )
        ai_logger.log_outcome(operation="optimize", success=False, attempts=state.attempt, error=state.last_error)
        return OptimizationResult(
            success=False,
            text=state.last_partial_text,
            original_prompt=raw_prompt,
            error=error,
            raw_output=state.last_raw_output,
            attempts=state.attempt,
            images_analyzed=len(images),
        )
