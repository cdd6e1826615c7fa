"""Drive an ordered stack of feature stages."""

from collections.abc import Sequence

import numpy as np

from corticalq.errors import (
    ERROR_STAGE_COUNT_MISMATCH,
    ERROR_STAGE_INPUT_SHAPE,
    ShapeMismatchError,
)
from corticalq.hierarchy._stage import FeatureStage, StageDescriptor
from corticalq.hierarchy.spatial_pooler import SpatialPoolerStage


def build_stages(
    input_shape: tuple[int, int],
    descriptors: Sequence[StageDescriptor],
    rng: np.random.Generator,
) -> list[FeatureStage]:
    """Create one spatial pooler per descriptor, chaining their shapes."""
    stages: list[FeatureStage] = []
    shape = tuple(input_shape)
    for descriptor in descriptors:
        stage = SpatialPoolerStage(shape, descriptor, rng)
        stages.append(stage)
        shape = stage.output_shape
    return stages


class FeatureHierarchy:
    """
    Ordered list of feature stages fed bottom-up.

    The first stage reads the encoder's dot grid and every later stage reads
    the output grid of the stage below. Shapes are checked once here, so a
    hierarchy that was constructed can always be stepped.
    """

    def __init__(
        self,
        input_shape: tuple[int, int],
        stages: Sequence[FeatureStage],
        descriptors: Sequence[StageDescriptor],
    ) -> None:
        if len(stages) != len(descriptors):
            error_message = ERROR_STAGE_COUNT_MISMATCH.format(
                num_stages=len(stages),
                num_descriptors=len(descriptors),
            )
            raise ShapeMismatchError(error_message)

        shape = tuple(input_shape)
        for index, stage in enumerate(stages):
            if tuple(stage.input_shape) != shape:
                error_message = ERROR_STAGE_INPUT_SHAPE.format(
                    index=index,
                    expected=tuple(stage.input_shape),
                    actual=shape,
                )
                raise ShapeMismatchError(error_message)
            shape = tuple(stage.output_shape)

        self.input_shape = tuple(input_shape)
        self.output_shape = shape
        self.stages = list(stages)
        self.descriptors = list(descriptors)

    def __len__(self) -> int:
        return len(self.stages)

    def process(self, grid: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        """Push ``grid`` through every stage and return the top output grid."""
        layer_input = np.asarray(grid, dtype=bool)
        for stage, descriptor in zip(self.stages, self.descriptors, strict=True):
            stage.begin_step()
            stage.activate(layer_input, descriptor)
            stage.learn(descriptor, rng)
            layer_input = np.array(stage.output, dtype=bool)
        return layer_input
