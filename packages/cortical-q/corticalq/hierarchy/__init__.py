"""Feature hierarchy stages and their driver."""

from ._stage import BoostFunction, FeatureStage, StageDescriptor, default_boost_function
from .fixed import FixedOutputStage
from .hierarchy import FeatureHierarchy, build_stages
from .spatial_pooler import SpatialPoolerStage

__all__ = [
    "BoostFunction",
    "FeatureHierarchy",
    "FeatureStage",
    "FixedOutputStage",
    "SpatialPoolerStage",
    "StageDescriptor",
    "build_stages",
    "default_boost_function",
]
