"""Feature-stage interface and per-stage descriptors."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

import numpy as np
from pydantic import BaseModel, Field

DEFAULT_REGION_WIDTH = 16
DEFAULT_REGION_HEIGHT = 16
DEFAULT_CONNECTION_RADIUS = 4.0
DEFAULT_INHIBITION_RADIUS = 2
DEFAULT_PERMANENCE_DISTANCE_BIAS = 0.1
DEFAULT_PERMANENCE_DISTANCE_FALLOFF = 0.25
DEFAULT_PERMANENCE_BIAS_FLOOR = 0.0
DEFAULT_CONNECTION_PERMANENCE_TARGET = 0.3
DEFAULT_CONNECTION_PERMANENCE_STD_DEV = 0.05
DEFAULT_MIN_PERMANENCE = 0.3
DEFAULT_MIN_OVERLAP = 2
DEFAULT_DESIRED_LOCAL_ACTIVITY = 2
DEFAULT_SPATIAL_PERMANENCE_INCREASE = 0.02
DEFAULT_SPATIAL_PERMANENCE_DECREASE = 0.01
DEFAULT_MIN_DUTY_CYCLE_RATIO = 0.01
DEFAULT_ACTIVE_DUTY_CYCLE_DECAY = 0.01
DEFAULT_OVERLAP_DUTY_CYCLE_DECAY = 0.01
DEFAULT_SUB_OVERLAP_PERMANENCE_INCREASE = 0.001

BoostFunction = Callable[[np.ndarray, np.ndarray], np.ndarray]


def default_boost_function(active: np.ndarray, minimum: np.ndarray) -> np.ndarray:
    """Map a duty cycle and its minimum to a boost multiplier.

    Works elementwise on arrays as well as on plain floats.
    """
    return (1.0 - minimum) + np.maximum(0.0, active - minimum)


class StageDescriptor(BaseModel):
    """Structural and learning parameters of one feature stage."""

    # Structure
    region_width: int = Field(default=DEFAULT_REGION_WIDTH, gt=0)
    region_height: int = Field(default=DEFAULT_REGION_HEIGHT, gt=0)
    connection_radius: float = Field(default=DEFAULT_CONNECTION_RADIUS, gt=0)
    inhibition_radius: int = Field(default=DEFAULT_INHIBITION_RADIUS, ge=0)

    # Permanence initialisation
    permanence_distance_bias: float = DEFAULT_PERMANENCE_DISTANCE_BIAS
    permanence_distance_falloff: float = DEFAULT_PERMANENCE_DISTANCE_FALLOFF
    permanence_bias_floor: float = DEFAULT_PERMANENCE_BIAS_FLOOR
    connection_permanence_target: float = DEFAULT_CONNECTION_PERMANENCE_TARGET
    connection_permanence_std_dev: float = Field(
        default=DEFAULT_CONNECTION_PERMANENCE_STD_DEV,
        ge=0,
    )

    # Activation
    min_permanence: float = DEFAULT_MIN_PERMANENCE
    min_overlap: int = Field(default=DEFAULT_MIN_OVERLAP, ge=0)
    desired_local_activity: int = Field(default=DEFAULT_DESIRED_LOCAL_ACTIVITY, gt=0)
    min_duty_cycle_ratio: float = DEFAULT_MIN_DUTY_CYCLE_RATIO
    active_duty_cycle_decay: float = DEFAULT_ACTIVE_DUTY_CYCLE_DECAY
    overlap_duty_cycle_decay: float = DEFAULT_OVERLAP_DUTY_CYCLE_DECAY
    boost_function: BoostFunction = Field(default=default_boost_function, exclude=True)

    # Learning
    spatial_permanence_increase: float = DEFAULT_SPATIAL_PERMANENCE_INCREASE
    spatial_permanence_decrease: float = DEFAULT_SPATIAL_PERMANENCE_DECREASE
    sub_overlap_permanence_increase: float = DEFAULT_SUB_OVERLAP_PERMANENCE_INCREASE

    @property
    def output_shape(self) -> tuple[int, int]:
        """Shape ``(rows, columns)`` of the stage's output grid."""
        return (self.region_height, self.region_width)


@runtime_checkable
class FeatureStage(Protocol):
    """One stage of the feature hierarchy.

    A stage consumes the boolean grid of the layer below and exposes its own
    boolean output grid. The hierarchy only relies on the shapes and on the
    call order ``begin_step -> activate -> learn``.
    """

    input_shape: tuple[int, int]
    output_shape: tuple[int, int]

    @property
    def output(self) -> np.ndarray:
        """Current boolean output grid of shape ``output_shape``."""
        ...

    def begin_step(self) -> None:
        """Prepare per-step state before activation."""
        ...

    def activate(self, input_grid: np.ndarray, descriptor: StageDescriptor) -> np.ndarray:
        """Run the competitive activation pass and return the output grid."""
        ...

    def learn(self, descriptor: StageDescriptor, rng: np.random.Generator) -> None:
        """Update the stage from the most recent activation."""
        ...

    def output_at(self, x: int, y: int) -> bool:
        """Return the output bit at column ``x`` and row ``y``."""
        ...
