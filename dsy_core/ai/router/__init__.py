"""
Router Module - pipeline selection and validated generation.
"""

from dsy_core.ai.router.contracts import GenerationResult
from dsy_core.ai.router.generation_router import GenerationRouter, extract_artifact
from dsy_core.ai.schemas.output import GeneratedFile, OutputMode, Pipeline

__all__ = [
    "GenerationResult",
    "GenerationRouter",
    "extract_artifact",
    "GeneratedFile",
    "OutputMode",
    "Pipeline",
]
