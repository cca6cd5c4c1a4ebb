"""
Optimizer Module - prompt elaboration and design-spec extraction.
"""

from dsy_core.ai.optimizer.prompt_optimizer import (
    OptimizationResult,
    PromptOptimizer,
    parse_optimization_output,
    validate_design_spec,
)

__all__ = [
    "OptimizationResult",
    "PromptOptimizer",
    "parse_optimization_output",
    "validate_design_spec",
]
