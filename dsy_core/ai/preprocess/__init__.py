"""
Preprocess Module - best-effort design-feature extraction from images.
"""

from dsy_core.ai.preprocess.design_features import (
    DEFAULT_DESIGN_FEATURES,
    DesignFeatureExtractor,
    DesignFeatures,
    FeatureColors,
    FeatureLayout,
    build_design_spec,
    merge_design_specs,
)

__all__ = [
    "DEFAULT_DESIGN_FEATURES",
    "DesignFeatureExtractor",
    "DesignFeatures",
    "FeatureColors",
    "FeatureLayout",
    "build_design_spec",
    "merge_design_specs",
]
