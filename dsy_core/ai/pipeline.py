"""
Page Builder - optimize, then generate.

Drives the two phases in order on behalf of one user request. Generation
avoids the credential the optimizer used, so the two phases spread across
the pool instead of hammering one key.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from dsy_core.ai.optimizer.prompt_optimizer import OptimizationResult, PromptOptimizer
from dsy_core.ai.router.contracts import GenerationResult
from dsy_core.ai.router.generation_router import GenerationRouter
from dsy_core.ai.schemas.assets import Asset
from dsy_core.ai.schemas.output import OutputMode
from dsy_core.services.project_store import ProjectStore
from dsy_core.services.titles import generate_project_title

logger = logging.getLogger("dsy.ai.pipeline")

HISTORY_PREFIX = "history:"


@dataclass
class BuildResult:
    optimization: OptimizationResult
    generation: GenerationResult
    title: str
    history_key: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.generation.success

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "title": self.title,
            "history_key": self.history_key,
            "optimization": self.optimization.to_dict(),
            "generation": self.generation.to_dict(),
        }


class PageBuilder:
    """
    Usage:
        builder = PageBuilder(optimizer, router, store)
        result = await builder.build("landing page for a bakery", assets)
    """

    def __init__(
        self,
        optimizer: PromptOptimizer,
        router: GenerationRouter,
        store: Optional[ProjectStore] = None,
    ):
        self.optimizer = optimizer
        self.router = router
        self.store = store

    async def build(
        self,
        prompt: str,
        assets: Optional[Sequence[Asset]] = None,
        mode: OutputMode = OutputMode.FLAT,
    ) -> BuildResult:
        """
        Run both phases. Never raises.

        A failed optimization does not stop generation: the raw prompt is
        used and the router derives what it can from the assets.
        """
        assets = list(assets or [])
        optimization = await self.optimizer.optimize(prompt, assets)
        if not optimization.success:
            logger.warning(f"Optimization failed, generating from raw prompt: {optimization.error}")

        generation = await self.router.generate(
            optimization.text or prompt,
            assets=assets,
            mode=mode,
            design_spec=optimization.design_spec,
            avoid_credential=optimization.credential_used,
        )

        result = BuildResult(
            optimization=optimization,
            generation=generation,
            title=generate_project_title(prompt),
        )
        if generation.success and self.store is not None:
            result.history_key = await self._save_history(prompt, result)
        return result

    async def _save_history(self, prompt: str, result: BuildResult) -> Optional[str]:
        key = f"{HISTORY_PREFIX}{uuid.uuid4().hex}"
        generation = result.generation
        record = {
            "title": result.title,
            "prompt": prompt,
            "optimizedPrompt": result.optimization.text,
            "mode": generation.mode.value,
            "pipeline": generation.pipeline.value,
            "html": generation.html,
            "css": generation.css,
            "files": [f.to_dict() for f in generation.files],
            "designSpec": generation.design_spec.to_wire() if generation.design_spec else None,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await self.store.put(key, record)
        except Exception as e:
            logger.exception(f"Failed to save history record: {e}")
            return None
        logger.info(f"Saved history record {key} ('{result.title}')")
        return key
