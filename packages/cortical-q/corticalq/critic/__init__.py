"""Action-value estimators."""

from ._estimator import ValueEstimator
from .mlp import MLPValueEstimator, MLPValueEstimatorConfig

__all__ = [
    "MLPValueEstimator",
    "MLPValueEstimatorConfig",
    "ValueEstimator",
]
