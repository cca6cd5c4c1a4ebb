"""
Generation Router - picks the pipeline and drives validated generation.

Decision rule:
=============
    any image asset  -> VISION pipeline:    pre-process first image (best-effort),
                                            merge features into the design spec,
                                            Gemini with the raw images
    no image asset   -> FAST_TEXT pipeline: SambaNova, no pre-processing

Every attempt is re-validated through the output parser; the first attempt
that clears the thresholds wins. Attempts are sequential and each one avoids
the credential used by the previous one.

Usage:
    router = GenerationRouter(vision_provider=gemini, text_provider=sambanova)
    result = await router.generate("dark portfolio hero section")
    if result.success:
        print(result.html, result.css)
"""

import logging
import time
from typing import Optional, Sequence, Tuple

from dsy_core.ai.attempts import AttemptState
from dsy_core.ai.errors import ConfigurationError, PreprocessFailure, ProviderError
from dsy_core.ai.monitoring import ai_logger
from dsy_core.ai.parsing.output_parser import (
    ParsedArtifact,
    build_fallback_files,
    parse_flat,
    parse_multi_file,
    validate,
)
from dsy_core.ai.preprocess.design_features import (
    DEFAULT_DESIGN_FEATURES,
    DesignFeatureExtractor,
    build_design_spec,
    merge_design_specs,
)
from dsy_core.ai.providers.base import AIProvider
from dsy_core.ai.router.contracts import GenerationResult
from dsy_core.ai.schemas.assets import Asset, has_images, image_assets
from dsy_core.ai.schemas.design_spec import DesignSpec
from dsy_core.ai.schemas.output import OutputMode, Pipeline
from dsy_core.core.config import settings

logger = logging.getLogger("dsy.ai.router")


def extract_artifact(raw_output: str, mode: OutputMode) -> Tuple[ParsedArtifact, bool]:
    """
    Parse raw output for the requested mode.

    Multi-file output without file markers degrades to the flat parse; a
    non-empty HTML or CSS result is wrapped into App.tsx + index.css.
    Returns (artifact, used_fallback).
    """
    if mode == OutputMode.FLAT:
        return parse_flat(raw_output), False

    artifact = parse_multi_file(raw_output)
    if artifact.files:
        return artifact, False

    flat = parse_flat(raw_output)
    if not (flat.html or flat.css):
        return artifact, False

    logger.warning("No file markers in multi-file output, wrapping flat HTML/CSS")
    return (
        ParsedArtifact(
            mode=OutputMode.MULTI_FILE,
            files=build_fallback_files(flat.html, flat.css),
            strategies=[*flat.strategies, "fallback-wrapper"],
        ),
        True,
    )


class GenerationRouter:
    """
    Top-level generation entry point.

    Holds no per-request state, so concurrent and repeated calls are safe;
    the only shared mutable state lives in the providers' credential pools.
    """

    def __init__(
        self,
        vision_provider: AIProvider,
        text_provider: AIProvider,
        preprocessor: Optional[DesignFeatureExtractor] = None,
        max_attempts: Optional[int] = None,
    ):
        self.vision_provider = vision_provider
        self.text_provider = text_provider
        self.preprocessor = preprocessor
        self.max_attempts = max_attempts or settings.MAX_GENERATION_ATTEMPTS

    @staticmethod
    def select_pipeline(assets: Optional[Sequence[Asset]]) -> Pipeline:
        return Pipeline.VISION if has_images(assets) else Pipeline.FAST_TEXT

    def provider_for(self, pipeline: Pipeline) -> AIProvider:
        return self.vision_provider if pipeline == Pipeline.VISION else self.text_provider

    # -----------------------------------------------------------------------
    # PUBLIC API
    # -----------------------------------------------------------------------

    async def generate(
        self,
        prompt: str,
        assets: Optional[Sequence[Asset]] = None,
        mode: OutputMode = OutputMode.FLAT,
        design_spec: Optional[DesignSpec] = None,
        avoid_credential: Optional[str] = None,
    ) -> GenerationResult:
        """
        Generate a page. Never raises.

        Args:
            prompt: User prompt or optimized prompt text
            assets: Reference material; any image selects the vision pipeline
            mode: Flat HTML/CSS or multi-file React
            design_spec: Spec from the prompt optimizer, if any
            avoid_credential: Credential the first attempt should not use

        Returns:
            GenerationResult, success=False with an error message on failure
        """
        start_time = time.time()
        pipeline = self.select_pipeline(assets)
        logger.info(
            f"Generation request: pipeline={pipeline.value} mode={mode.value} "
            f"assets={len(assets or [])} prompt_length={len(prompt or '')}"
        )

        try:
            result = await self._generate(prompt, list(assets or []), mode, pipeline, design_spec, avoid_credential)
        except Exception as e:
            logger.exception(f"Generation failed: {e}")
            result = GenerationResult(
                success=False,
                mode=mode,
                pipeline=pipeline,
                provider=self.provider_for(pipeline).provider_type,
                error=f"Generation failed: {e}",
            )

        result.latency_ms = (time.time() - start_time) * 1000
        return result

    # -----------------------------------------------------------------------
    # INTERNALS
    # -----------------------------------------------------------------------

    async def _prepare_design_spec(
        self,
        assets: Sequence[Asset],
        design_spec: Optional[DesignSpec],
    ) -> Tuple[DesignSpec, bool]:
        """
        Enhance the spec with features of the first image.

        On pre-processing failure an existing spec is kept unchanged;
        without one, the default features are used.
        """
        try:
            if self.preprocessor is None:
                raise PreprocessFailure("No design-feature pre-processor configured")
            features = await self.preprocessor.extract(image_assets(assets)[0])
        except PreprocessFailure as e:
            logger.warning(f"Pre-processing skipped, using fallback spec: {e}")
            if design_spec is not None:
                return design_spec, False
            return build_design_spec(DEFAULT_DESIGN_FEATURES), False

        return merge_design_specs(design_spec, build_design_spec(features)), True

    async def _generate(
        self,
        prompt: str,
        assets: Sequence[Asset],
        mode: OutputMode,
        pipeline: Pipeline,
        design_spec: Optional[DesignSpec],
        avoid_credential: Optional[str],
    ) -> GenerationResult:
        provider = self.provider_for(pipeline)
        used_preprocessor = False
        if pipeline == Pipeline.VISION:
            design_spec, used_preprocessor = await self._prepare_design_spec(assets, design_spec)

        base = dict(
            mode=mode,
            pipeline=pipeline,
            provider=provider.provider_type,
            design_spec=design_spec,
            used_preprocessor=used_preprocessor,
        )

        state = AttemptState(last_credential=avoid_credential)
        while state.attempt < self.max_attempts:
            state = state.next()
            try:
                response = await provider.generate_page(
                    prompt,
                    assets=assets,
                    design_spec=design_spec,
                    mode=mode,
                    exclude=provider.rotation_exclude(state.last_credential),
                )
            except ConfigurationError as e:
                ai_logger.log_outcome(
                    operation="generate", success=False, attempts=state.attempt,
                    pipeline=pipeline.value, error=str(e),
                )
                return GenerationResult(success=False, error=str(e), attempts=state.attempt, **base)
            except ProviderError as e:
                ai_logger.log_attempt(
                    operation="generate",
                    attempt=state.attempt,
                    max_attempts=self.max_attempts,
                    provider=provider.name,
                    credential=e.credential,
                    error=str(e),
                )
                state = state.failed(str(e), credential=e.credential)
                continue

            artifact, fallback = extract_artifact(response.content, mode)
            error = validate(artifact)
            ai_logger.log_attempt(
                operation="generate",
                attempt=state.attempt,
                max_attempts=self.max_attempts,
                provider=provider.name,
                credential=response.credential,
                error=error,
                latency_ms=response.latency_ms,
                metadata={"strategies": artifact.strategies},
            )
            if error:
                state = state.failed(error, credential=response.credential, raw_output=response.content)
                continue

            ai_logger.log_outcome(
                operation="generate", success=True, attempts=state.attempt, pipeline=pipeline.value,
            )
            return GenerationResult(
                success=True,
                html=artifact.html,
                css=artifact.css,
                files=artifact.files,
                raw_output=response.content,
                attempts=state.attempt,
                fallback=fallback,
                model=response.model,
                **base,
            )

        # Exhausted: surface the last raw output and whatever it parsed into
        partial, fallback = extract_artifact(state.last_raw_output, mode)
        error = f"Generation failed after {state.attempt} attempt(s): {state.last_error}"
        ai_logger.log_outcome(
            operation="generate", success=False, attempts=state.attempt,
            pipeline=pipeline.value, error=state.last_error,
        )
        return GenerationResult(
            success=False,
            html=partial.html,
            css=partial.css,
            files=partial.files,
            error=error,
            raw_output=state.last_raw_output,
            attempts=state.attempt,
            fallback=fallback,
            **base,
        )
