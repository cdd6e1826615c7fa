"""
Minibatch rehearsal of the value estimator on the replay chain.

Every pass draws ``minibatch_size`` transitions uniformly with replacement
from the chain as it is at that moment. For each draw the estimator's own
prediction is used as the target, except at the transition's exploratory
action, where the stored action value is substituted. Only that output
therefore carries error. The summed gradient is averaged over the minibatch
and consumed by one optimizer step.
"""

import numpy as np

from corticalq.critic import ValueEstimator
from corticalq.replay import ReplayChain

DEFAULT_BACKPROP_PASSES = 50
DEFAULT_MINIBATCH_SIZE = 16


class RehearsalTrainer:
    """Repeated masked fitted-Q training passes over sampled transitions."""

    def __init__(
        self,
        passes: int = DEFAULT_BACKPROP_PASSES,
        minibatch_size: int = DEFAULT_MINIBATCH_SIZE,
    ) -> None:
        self.passes = passes
        self.minibatch_size = minibatch_size

    def build_minibatch(
        self,
        estimator: ValueEstimator,
        chain: ReplayChain,
        rng: np.random.Generator,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Sample transitions and return ``(states, targets)`` arrays."""
        indices = chain.sample_indices(rng, self.minibatch_size)
        samples = [chain[int(index)] for index in indices]

        states = np.stack([sample.state for sample in samples])
        targets = np.array(estimator.evaluate(states), dtype=np.float64)
        for row, sample in enumerate(samples):
            targets[row, sample.exploratory_action] = sample.target_value

        return states, targets

    def rehearse(  # noqa: PLR0913
        self,
        estimator: ValueEstimator,
        chain: ReplayChain,
        rng: np.random.Generator,
        *,
        decay: float,
        rate: float,
        momentum: float,
    ) -> float:
        """Run all passes and return the mean per-sample loss of the last one."""
        if len(chain) == 0:
            return 0.0

        scale = 1.0 / self.minibatch_size
        loss = 0.0
        for _ in range(self.passes):
            estimator.begin_gradient_accumulation()
            states, targets = self.build_minibatch(estimator, chain, rng)
            loss = estimator.accumulate_gradient(states, targets) * scale
            estimator.scale_accumulated_gradient(scale)
            estimator.apply_gradient_step(decay, rate, momentum)
        return loss
