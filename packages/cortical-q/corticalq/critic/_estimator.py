"""Interface of the action-value function approximator."""

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class ValueEstimator(Protocol):
    """Differentiable mapping from a state vector to one value per action.

    Training is split into explicit phases so the caller controls how many
    samples go into one optimizer step:
    ``begin_gradient_accumulation -> accumulate_gradient (xN) ->
    scale_accumulated_gradient -> apply_gradient_step``.
    """

    num_inputs: int
    num_outputs: int

    def evaluate(self, state: np.ndarray) -> np.ndarray:
        """Return the action values for a state (or a batch of states)."""
        ...

    def begin_gradient_accumulation(self) -> None:
        """Reset the gradient accumulator."""
        ...

    def accumulate_gradient(self, state: np.ndarray, target: np.ndarray) -> float:
        """Add the squared-error gradient towards ``target`` and return the loss."""
        ...

    def scale_accumulated_gradient(self, factor: float) -> None:
        """Multiply the accumulated gradient by ``factor``."""
        ...

    def apply_gradient_step(self, decay: float, rate: float, momentum: float) -> None:
        """Consume the accumulated gradient in one optimizer update."""
        ...
