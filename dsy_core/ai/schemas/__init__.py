"""
Schemas Module - request inputs shared across the orchestration layer.
"""

from dsy_core.ai.schemas.assets import (
    Asset,
    AssetKind,
    decode_data_uri,
    has_images,
    image_assets,
    link_assets,
)
from dsy_core.ai.schemas.design_spec import (
    ColorPalette,
    DesignComponent,
    DesignSpec,
    LayoutSpec,
    Typography,
)
from dsy_core.ai.schemas.output import ChatTask, GeneratedFile, OutputMode, Pipeline

__all__ = [
    "Asset",
    "AssetKind",
    "decode_data_uri",
    "has_images",
    "image_assets",
    "link_assets",
    "ColorPalette",
    "DesignComponent",
    "DesignSpec",
    "LayoutSpec",
    "Typography",
    "ChatTask",
    "GeneratedFile",
    "OutputMode",
    "Pipeline",
]
