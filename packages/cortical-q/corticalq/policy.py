"""Epsilon-greedy action selection."""

import numpy as np

from corticalq.replay import argmax_action


def epsilon_greedy(
    action_values: np.ndarray,
    epsilon: float,
    rng: np.random.Generator,
) -> tuple[int, int]:
    """
    Pick an action from ``action_values``.

    One uniform draw decides whether to explore; only when exploring is a
    second draw spent on the random action.

    Returns
    -------
        Tuple of (chosen action, greedy action)
    """
    greedy = argmax_action(action_values)
    if rng.random() < epsilon:
        return int(rng.integers(0, len(action_values))), greedy
    return greedy, greedy
