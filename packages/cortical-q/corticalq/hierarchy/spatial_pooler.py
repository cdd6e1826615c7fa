"""
Spatial pooling feature stage.

A region of columns laid out on a ``region_height x region_width`` grid is
mapped onto the input grid. Every column has a square receptive field of
``connection_radius`` input cells around its projected centre and keeps one
permanence per potential synapse.

Per step:
1. **Overlap**: count the active inputs reached through connected synapses
   (permanence >= ``min_permanence``), drop columns below ``min_overlap`` and
   scale the rest by the column's boost.
2. **Inhibition**: a column wins when fewer than ``desired_local_activity``
   columns inside its square inhibition neighbourhood have a larger overlap.
3. **Duty cycles and boosting**: exponential moving averages of activity and
   sufficient overlap; boosts come from the stage's boost function applied to
   the active duty cycle and ``min_duty_cycle_ratio`` times the largest duty
   cycle in the neighbourhood.
4. **Learning**: winners strengthen synapses to active inputs and weaken the
   others; columns that rarely reach the minimum overlap get all their
   permanences bumped.
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from corticalq.hierarchy._stage import StageDescriptor
from corticalq.logging_config import logger


def _neighbourhood_windows(grid: np.ndarray, radius: int, fill: float) -> np.ndarray:
    """Return the ``(2r+1) x (2r+1)`` window around every cell of ``grid``."""
    padded = np.pad(grid, radius, mode="constant", constant_values=fill)
    size = 2 * radius + 1
    return sliding_window_view(padded, (size, size))


class SpatialPoolerStage:
    """Numpy spatial pooler over a boolean input grid."""

    def __init__(
        self,
        input_shape: tuple[int, int],
        descriptor: StageDescriptor,
        rng: np.random.Generator,
    ) -> None:
        self.input_shape = tuple(input_shape)
        self.output_shape = descriptor.output_shape
        self.inhibition_radius = descriptor.inhibition_radius

        in_rows, in_cols = self.input_shape
        rows, cols = self.output_shape

        column_y, column_x = np.mgrid[0:rows, 0:cols]
        centre_x = ((column_x + 0.5) * in_cols / cols).ravel()
        centre_y = ((column_y + 0.5) * in_rows / rows).ravel()

        input_y, input_x = np.mgrid[0:in_rows, 0:in_cols]
        dx = (input_x.ravel() + 0.5)[None, :] - centre_x[:, None]
        dy = (input_y.ravel() + 0.5)[None, :] - centre_y[:, None]
        distance = np.maximum(np.abs(dx), np.abs(dy))

        self.potential = distance <= descriptor.connection_radius

        distance_bias = descriptor.permanence_distance_bias * np.maximum(
            descriptor.permanence_bias_floor,
            1.0 - descriptor.permanence_distance_falloff * distance,
        )
        permanences = rng.normal(
            descriptor.connection_permanence_target,
            descriptor.connection_permanence_std_dev,
            size=distance.shape,
        )
        self.permanences = np.where(
            self.potential,
            np.clip(permanences + distance_bias, 0.0, 1.0),
            0.0,
        )

        self.boosts = np.ones(self.output_shape)
        self.active_duty_cycles = np.zeros(self.output_shape)
        self.overlap_duty_cycles = np.zeros(self.output_shape)
        self.min_duty_cycles = np.zeros(self.output_shape)

        self._output = np.zeros(self.output_shape, dtype=bool)
        self.previous_output = np.zeros(self.output_shape, dtype=bool)
        self._active_inputs = np.zeros(in_rows * in_cols, dtype=bool)

        logger.info(
            f"SpatialPoolerStage {self.input_shape} -> {self.output_shape}, "
            f"{int(self.potential.sum()):,} potential synapses",
        )

    @property
    def output(self) -> np.ndarray:
        """Current boolean output grid."""
        return self._output

    def begin_step(self) -> None:
        """Keep the last output as the previous one."""
        self.previous_output = self._output.copy()

    def activate(self, input_grid: np.ndarray, descriptor: StageDescriptor) -> np.ndarray:
        """Compute boosted overlaps, inhibit locally and update duty cycles."""
        self._active_inputs = np.asarray(input_grid, dtype=bool).ravel()

        connected = self.potential & (self.permanences >= descriptor.min_permanence)
        raw_overlap = (connected @ self._active_inputs.astype(np.float64)).reshape(
            self.output_shape,
        )
        sufficient = raw_overlap >= descriptor.min_overlap
        overlap = np.where(sufficient, raw_overlap * self.boosts, 0.0)

        windows = _neighbourhood_windows(overlap, self.inhibition_radius, -np.inf)
        stronger = (windows > overlap[..., None, None]).sum(axis=(2, 3))
        self._output = (overlap > 0.0) & (stronger < descriptor.desired_local_activity)

        self.active_duty_cycles += descriptor.active_duty_cycle_decay * (
            self._output.astype(np.float64) - self.active_duty_cycles
        )
        self.overlap_duty_cycles += descriptor.overlap_duty_cycle_decay * (
            sufficient.astype(np.float64) - self.overlap_duty_cycles
        )

        neighbourhood_max = _neighbourhood_windows(
            self.active_duty_cycles,
            self.inhibition_radius,
            0.0,
        ).max(axis=(2, 3))
        self.min_duty_cycles = descriptor.min_duty_cycle_ratio * neighbourhood_max
        self.boosts = np.asarray(
            descriptor.boost_function(self.active_duty_cycles, self.min_duty_cycles),
            dtype=np.float64,
        )

        return self._output

    def learn(
        self,
        descriptor: StageDescriptor,
        rng: np.random.Generator,  # noqa: ARG002
    ) -> None:
        """Adapt permanences of the winning and of the starved columns."""
        winners = self._output.ravel()
        if winners.any():
            change = np.where(
                self._active_inputs,
                descriptor.spatial_permanence_increase,
                -descriptor.spatial_permanence_decrease,
            )
            self.permanences[winners] += np.where(self.potential[winners], change, 0.0)

        starved = (self.overlap_duty_cycles < self.min_duty_cycles).ravel()
        if starved.any():
            self.permanences[starved] += np.where(
                self.potential[starved],
                descriptor.sub_overlap_permanence_increase,
                0.0,
            )

        np.clip(self.permanences, 0.0, 1.0, out=self.permanences)

    def output_at(self, x: int, y: int) -> bool:
        """Return the output bit at column ``x`` and row ``y``."""
        return bool(self._output[y, x])
