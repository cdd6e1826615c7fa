"""
Bounded replay chain of past transitions.

The chain is ordered newest first. New transitions are pushed at the front and
the oldest ones fall off the back once the chain holds more than ``capacity``
entries; nothing else ever removes a transition. Transitions are owned by the
chain: their action values and greedy action are rewritten in place by the
eligibility trace sweep, and rehearsal only reads them.
"""

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from corticalq.logging_config import logger

DEFAULT_MAX_REPLAY_CHAIN_SIZE = 600


def argmax_action(action_values: np.ndarray) -> int:
    """Index of the largest action value, lowest index on ties."""
    return int(np.argmax(action_values))


@dataclass(slots=True)
class Transition:
    """One replayable step: the state, what was done and the value targets."""

    state: np.ndarray
    exploratory_action: int
    greedy_action: int
    reward: float
    action_values: np.ndarray

    def __post_init__(self) -> None:
        self.state = np.array(self.state, dtype=np.float64)
        self.action_values = np.array(self.action_values, dtype=np.float64)

    @property
    def target_value(self) -> float:
        """Stored value of the action that was actually taken."""
        return float(self.action_values[self.exploratory_action])


class ReplayChain:
    """Time-ordered, newest-first history of at most ``capacity`` transitions."""

    def __init__(self, capacity: int = DEFAULT_MAX_REPLAY_CHAIN_SIZE) -> None:
        self.capacity = capacity
        self._transitions: deque[Transition] = deque()

    def __len__(self) -> int:
        return len(self._transitions)

    def __iter__(self) -> Iterator[Transition]:
        return iter(self._transitions)

    def __getitem__(self, index: int) -> Transition:
        return self._transitions[index]

    def push(self, transition: Transition) -> list[Transition]:
        """Insert ``transition`` at the front and return the evicted ones."""
        self._transitions.appendleft(transition)
        evicted = []
        while len(self._transitions) > self.capacity:
            evicted.append(self._transitions.pop())
        if evicted:
            logger.debug(f"Replay chain full, evicted {len(evicted)} oldest transition(s)")
        return evicted

    def propagate(self, error: float, trace_decay: float) -> None:
        """Spread ``error`` backwards over the chain with a geometric trace.

        The front transition receives ``trace_decay * error``, the next one
        ``trace_decay**2 * error`` and so on. Each share is added to the value
        of the transition's own exploratory action, after which its greedy
        action is recomputed from the updated values.
        """
        trace = trace_decay
        for transition in self._transitions:
            transition.action_values[transition.exploratory_action] += trace * error
            transition.greedy_action = argmax_action(transition.action_values)
            trace *= trace_decay

    def sample_indices(self, rng: np.random.Generator, count: int) -> np.ndarray:
        """Draw ``count`` positions uniformly with replacement."""
        return rng.integers(0, len(self._transitions), size=count)

    def clear(self) -> None:
        """Drop every transition."""
        self._transitions.clear()
