"""
Generation Router - HTTP surface for prompt optimization and page generation.

Handlers only translate between JSON and the orchestration layer; every
decision (pipeline, retries, parsing) is made below this file.

    POST /generate/optimize            prompt -> optimized text + DesignSpec
    POST /generate                     prompt (+ spec) -> page
    POST /generate/build               optimize, then generate
    GET  /generate/status              credential pool health
    POST /generate/credentials/reset   clear failed keys in every pool
    POST /generate/preview             HTML + CSS -> one preview document
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from dsy_core.ai.credentials import CredentialPool
from dsy_core.ai.optimizer.prompt_optimizer import PromptOptimizer
from dsy_core.ai.pipeline import PageBuilder
from dsy_core.ai.preprocess.design_features import DesignFeatureExtractor
from dsy_core.ai.router.contracts import GenerationResult
from dsy_core.ai.router.generation_router import GenerationRouter
from dsy_core.ai.schemas.assets import Asset
from dsy_core.ai.schemas.design_spec import DesignSpec
from dsy_core.ai.schemas.output import OutputMode
from dsy_core.deps import (
    get_credential_pools,
    get_optimizer,
    get_page_builder,
    get_preprocessor,
    get_router,
)
from dsy_core.services.preview import compile_live_preview


# ---------------------------------------------------------------------------
# LOGGER SETUP
# ---------------------------------------------------------------------------
logger = logging.getLogger("dsy.routers.generation")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/generate", tags=["generate"])


# ---------------------------------------------------------------------------
# REQUEST/RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class OptimizeRequest(BaseModel):
    """
    Request schema for /generate/optimize.

    Example:
    {
        "prompt": "dark portfolio for a photographer",
        "assets": [{"kind": "image", "payload": "data:image/png;base64,..."}]
    }
    """
    prompt: str = Field(..., min_length=1, description="Raw user prompt")
    assets: List[Asset] = Field(default_factory=list, description="Reference images, links, documents")


class GenerateRequest(BaseModel):
    """Request schema for /generate and /generate/build."""
    prompt: str = Field(..., min_length=1, description="Prompt or optimized prompt text")
    assets: List[Asset] = Field(default_factory=list)
    mode: OutputMode = Field(default=OutputMode.FLAT, description="flat or multi_file")
    design_spec: Optional[Dict[str, Any]] = Field(
        default=None,
        description="DesignSpec JSON from a previous optimization",
    )


class OptimizeResponse(BaseModel):
    success: bool
    text: str = ""
    design_spec: Optional[Dict[str, Any]] = None
    original_prompt: str = ""
    error: Optional[str] = None
    attempts: int = 0
    images_analyzed: int = 0


class GenerationResponse(BaseModel):
    success: bool
    mode: str
    pipeline: str
    provider: Optional[str] = None
    model: str = ""
    error: Optional[str] = None
    raw_output: str = ""
    attempts: int = 0
    design_spec: Optional[Dict[str, Any]] = None
    used_preprocessor: bool = False
    latency_ms: float = 0.0
    html: Optional[str] = None
    css: Optional[str] = None
    files: Optional[List[Dict[str, Any]]] = None
    fallback: Optional[bool] = None


class BuildResponse(BaseModel):
    success: bool
    title: str
    history_key: Optional[str] = None
    optimization: OptimizeResponse
    generation: GenerationResponse


class StatusResponse(BaseModel):
    """Response schema for /generate/status."""
    pools: Dict[str, Dict[str, Any]]
    preprocessor_enabled: bool


class PreviewRequest(BaseModel):
    html: str = Field(..., description="HTML document or fragment")
    css: str = Field(default="", description="Stylesheet to inline")


class PreviewResponse(BaseModel):
    document: str


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------

def _parse_design_spec(raw: Optional[Dict[str, Any]]) -> Optional[DesignSpec]:
    if raw is None:
        return None
    try:
        return DesignSpec.model_validate(raw)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid design_spec: {e.error_count()} error(s)",
        )


def _generation_response(result: GenerationResult) -> GenerationResponse:
    return GenerationResponse(**result.to_dict())


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("/optimize", response_model=OptimizeResponse)
async def optimize_prompt(
    request: OptimizeRequest,
    optimizer: PromptOptimizer = Depends(get_optimizer),
):
    """
    Elaborate the prompt and extract a DesignSpec.

    Failures come back as success=false with the partial text, if any.
    """
    result = await optimizer.optimize(request.prompt, request.assets)
    return OptimizeResponse(**result.to_dict())


@router.post("", response_model=GenerationResponse)
async def generate_page(
    request: GenerateRequest,
    generation_router: GenerationRouter = Depends(get_router),
):
    """
    Generate a page.

    Any image asset routes to the vision pipeline; otherwise the fast text
    pipeline is used.
    """
    design_spec = _parse_design_spec(request.design_spec)
    result = await generation_router.generate(
        request.prompt,
        assets=request.assets,
        mode=request.mode,
        design_spec=design_spec,
    )
    return _generation_response(result)


@router.post("/build", response_model=BuildResponse)
async def build_page(
    request: GenerateRequest,
    builder: PageBuilder = Depends(get_page_builder),
):
    """Optimize the prompt, then generate from the optimized text."""
    result = await builder.build(request.prompt, assets=request.assets, mode=request.mode)
    return BuildResponse(
        success=result.success,
        title=result.title,
        history_key=result.history_key,
        optimization=OptimizeResponse(**result.optimization.to_dict()),
        generation=_generation_response(result.generation),
    )


@router.get("/status", response_model=StatusResponse)
async def get_status(
    pools: Dict[str, CredentialPool] = Depends(get_credential_pools),
    preprocessor: DesignFeatureExtractor = Depends(get_preprocessor),
):
    """Configured, failed and available key counts per pool."""
    return StatusResponse(
        pools={name: pool.to_dict() for name, pool in pools.items()},
        preprocessor_enabled=preprocessor.enabled,
    )


@router.post("/credentials/reset", response_model=StatusResponse)
async def reset_credentials(
    pools: Dict[str, CredentialPool] = Depends(get_credential_pools),
    preprocessor: DesignFeatureExtractor = Depends(get_preprocessor),
):
    """Clear the failed set of every pool."""
    for pool in pools.values():
        pool.reset_all()
    logger.info(f"Reset credential pools: {', '.join(pools)}")
    return StatusResponse(
        pools={name: pool.to_dict() for name, pool in pools.items()},
        preprocessor_enabled=preprocessor.enabled,
    )


@router.post("/preview", response_model=PreviewResponse)
async def preview(request: PreviewRequest):
    """Inline the stylesheet into the document for the preview frame."""
    return PreviewResponse(document=compile_live_preview(request.html, request.css))
