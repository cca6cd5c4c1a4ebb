"""
Design-Feature Pre-processor - dominant colors and coarse layout from an image.

A Gradio Space analyzes the first reference image before vision generation.
The call is best-effort: any failure raises PreprocessFailure and the router
substitutes DEFAULT_DESIGN_FEATURES.

Wire format (Gradio REST):
    POST {PREPROCESSOR_URL}/run/preprocess   {"data": ["data:image/png;base64,..."]}
    200  {"data": [{"colors": {...}, "layout": {...}}]}   (the item may be a JSON string)
"""

import json
import logging
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from dsy_core.ai.errors import PreprocessFailure
from dsy_core.ai.schemas.assets import Asset
from dsy_core.ai.schemas.design_spec import ColorPalette, DesignSpec, LayoutSpec
from dsy_core.core.config import settings

logger = logging.getLogger("dsy.ai.preprocess")


# ---------------------------------------------------------------------------
# FEATURE MODELS
# ---------------------------------------------------------------------------


class _FeatureModel(BaseModel):
    # The Space answers in snake_case; camelCase is accepted too
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class FeatureColors(_FeatureModel):
    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None
    background: Optional[str] = None
    text: Optional[str] = None
    is_dark_theme: Optional[bool] = None


class FeatureLayout(_FeatureModel):
    type: Optional[str] = None
    sections: Optional[List[str]] = None
    estimated_columns: Optional[int] = None


class DesignFeatures(_FeatureModel):
    """What the pre-processor extracted from one image."""
    colors: FeatureColors = Field(default_factory=FeatureColors)
    layout: FeatureLayout = Field(default_factory=FeatureLayout)


# Dark blue palette, landing layout
DEFAULT_DESIGN_FEATURES = DesignFeatures(
    colors=FeatureColors(
        primary="#3b82f6",
        secondary="#1e40af",
        accent="#60a5fa",
        background="#1e1e2e",
        text="#ffffff",
        is_dark_theme=True,
    ),
    layout=FeatureLayout(
        type="landing",
        sections=["navbar", "hero", "features", "footer"],
        estimated_columns=3,
    ),
)

DARK_THEME_EFFECTS = ["glassmorphism", "gradient", "shadows"]
LIGHT_THEME_EFFECTS = ["shadows", "subtle-gradient"]


# ---------------------------------------------------------------------------
# SPEC BUILDING
# ---------------------------------------------------------------------------


def build_design_spec(features: DesignFeatures) -> DesignSpec:
    """
    Turn extracted features into a DesignSpec.

    Missing colors fall back to the default palette; missing layout falls
    back to a landing page with header/hero/features/footer in 3 columns.
    """
    defaults = DEFAULT_DESIGN_FEATURES.colors
    colors = features.colors
    layout = features.layout
    is_dark = colors.is_dark_theme if colors.is_dark_theme is not None else True

    return DesignSpec(
        layout=LayoutSpec(
            type=layout.type or "landing",
            sections=layout.sections or ["header", "hero", "features", "footer"],
            columns=layout.estimated_columns or 3,
        ),
        colors=ColorPalette(
            background=colors.background or defaults.background,
            primary=colors.primary or defaults.primary,
            secondary=colors.secondary or defaults.secondary,
            accent=colors.accent or defaults.accent,
            text=colors.text or defaults.text,
        ),
        effects=list(DARK_THEME_EFFECTS if is_dark else LIGHT_THEME_EFFECTS),
        is_dark_theme=is_dark,
    )


def merge_design_specs(base: Optional[DesignSpec], derived: DesignSpec) -> DesignSpec:
    """
    Merge image-derived features into an existing spec.

    Image colors and layout win, every other field of `base` is kept and
    effects are unioned in order. Without a base, `derived` is used as is.
    """
    if base is None:
        return derived

    colors = base.colors.model_dump(exclude_none=True)
    colors.update(derived.colors.model_dump(exclude_none=True))

    return base.model_copy(
        update={
            "layout": derived.layout.model_copy(),
            "colors": ColorPalette(**colors),
            "effects": list(dict.fromkeys([*base.effects, *derived.effects])),
            "is_dark_theme": (
                derived.is_dark_theme if derived.is_dark_theme is not None else base.is_dark_theme
            ),
        }
    )


# ---------------------------------------------------------------------------
# EXTRACTOR
# ---------------------------------------------------------------------------


class DesignFeatureExtractor:
    """
    Client for the design-feature Space.

    Usage:
        extractor = DesignFeatureExtractor()
        try:
            features = await extractor.extract(image_asset)
        except PreprocessFailure:
            features = DEFAULT_DESIGN_FEATURES
    """

    ENDPOINT = "/run/preprocess"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        enabled: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.PREPROCESSOR_URL).rstrip("/")
        self.timeout = timeout or settings.PREPROCESSOR_TIMEOUT
        self.enabled = settings.PREPROCESSOR_ENABLED if enabled is None else enabled
        self._transport = transport

    async def extract(self, image: Asset) -> DesignFeatures:
        """
        Analyze one image.

        Raises:
            PreprocessFailure: disabled, unreachable, non-200 or unreadable reply
        """
        if not self.enabled:
            raise PreprocessFailure("Design-feature pre-processor disabled")
        if not image.payload:
            raise PreprocessFailure("Image asset has no payload")

        url = f"{self.base_url}{self.ENDPOINT}"
        logger.info(f"Pre-processing image '{image.name or 'unnamed'}' via {url}")

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.post(
                    url,
                    json={"data": [image.payload]},
                    timeout=self.timeout,
                )
            except httpx.HTTPError as e:
                logger.warning(f"Pre-processor unreachable: {e}")
                raise PreprocessFailure(f"Network error: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Pre-processor returned {response.status_code}")
            raise PreprocessFailure(f"Pre-processor returned status {response.status_code}")

        return self._parse_reply(response)

    def _parse_reply(self, response: httpx.Response) -> DesignFeatures:
        try:
            body = response.json()
        except ValueError as e:
            raise PreprocessFailure("Pre-processor reply is not JSON") from e

        payload: Any = body.get("data") if isinstance(body, dict) else None
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except ValueError as e:
                raise PreprocessFailure("Pre-processor data is not JSON") from e

        if not isinstance(payload, dict) or not ("colors" in payload or "layout" in payload):
            raise PreprocessFailure("Pre-processor reply has no colors or layout")

        try:
            features = DesignFeatures.model_validate(payload)
        except ValidationError as e:
            raise PreprocessFailure(f"Pre-processor reply invalid: {e.error_count()} error(s)") from e

        logger.info("Pre-processing complete")
        return features
