"""Feature stage with a constant output grid."""

import numpy as np

from corticalq.hierarchy._stage import StageDescriptor


class FixedOutputStage:
    """Stage that ignores its input and always emits the same grid.

    Holds the hierarchy output constant, e.g. to study the value learner in
    isolation from feature learning.
    """

    def __init__(self, input_shape: tuple[int, int], output: np.ndarray) -> None:
        self.input_shape = tuple(input_shape)
        self._output = np.array(output, dtype=bool)
        self.output_shape = self._output.shape

    @property
    def output(self) -> np.ndarray:
        """Current boolean output grid."""
        return self._output

    def begin_step(self) -> None:
        """No per-step state."""

    def activate(
        self,
        input_grid: np.ndarray,  # noqa: ARG002
        descriptor: StageDescriptor,  # noqa: ARG002
    ) -> np.ndarray:
        """Return the fixed output grid."""
        return self._output

    def learn(
        self,
        descriptor: StageDescriptor,  # noqa: ARG002
        rng: np.random.Generator,  # noqa: ARG002
    ) -> None:
        """Nothing to learn."""

    def output_at(self, x: int, y: int) -> bool:
        """Return the output bit at column ``x`` and row ``y``."""
        return bool(self._output[y, x])
