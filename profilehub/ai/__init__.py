# profilehub/ai/__init__.py
# Optimization collaborator: suggestion types & the model-backed optimizer

from .types import GenerateResult
from .optimizer import (
    LLMOptimizer,
    OptimizationSuggestion,
    Optimizer,
    is_optimization_stale,
    job_description_hash,
)

__all__ = [
    "GenerateResult",
    "LLMOptimizer",
    "OptimizationSuggestion",
    "Optimizer",
    "is_optimization_stale",
    "job_description_hash",
]
