"""
Temporal-difference credit assignment over the replay chain.

Each step turns the previous step's bookkeeping into a new transition:

1. A soft bootstrapped target for last step's greedy action::

       target = Q_prev[a*] + tau_inv * (r + gamma * max(Q(s')) - Q_prev[a*])

2. The TD error against the action actually taken::

       delta = q_alpha * (target - Q_prev[a])

3. The new transition stores ``Q_prev`` with ``delta`` added at ``a``.
4. Every older transition gets ``(gamma * lambda)**k * delta`` added to its
   own exploratory action, k = 1 for the most recent one, and its greedy
   action is recomputed. Older targets are not re-bootstrapped.
5. The new transition is pushed at the front of the chain.
"""

from dataclasses import dataclass, field

import numpy as np

from corticalq.replay import ReplayChain, Transition


@dataclass(slots=True)
class Bookkeeping:
    """What the agent remembers about the previous step."""

    state: np.ndarray
    action_values: np.ndarray
    greedy_action: int = 0
    exploratory_action: int = 0

    @classmethod
    def zeros(cls, state_size: int, num_actions: int) -> "Bookkeeping":
        """Bookkeeping before the first step."""
        return cls(state=np.zeros(state_size), action_values=np.zeros(num_actions))


@dataclass(slots=True)
class CreditResult:
    """Outcome of one credit assignment."""

    target: float
    td_error: float
    transition: Transition
    evicted: list[Transition] = field(default_factory=list)


def soft_bootstrap_target(
    previous_values: np.ndarray,
    previous_greedy_action: int,
    reward: float,
    next_max_value: float,
    gamma: float,
    tau_inv: float,
) -> float:
    """Move last step's greedy value a ``tau_inv`` fraction towards the Bellman backup."""
    current = float(previous_values[previous_greedy_action])
    return current + tau_inv * (reward + gamma * next_max_value - current)


def temporal_difference_error(
    target: float,
    previous_values: np.ndarray,
    previous_action: int,
    q_alpha: float,
) -> float:
    """Scaled error between ``target`` and the value of the action taken."""
    return q_alpha * (target - float(previous_values[previous_action]))


def assign_credit(  # noqa: PLR0913
    chain: ReplayChain,
    bookkeeping: Bookkeeping,
    reward: float,
    next_values: np.ndarray,
    *,
    q_alpha: float,
    gamma: float,
    trace_lambda: float,
    tau_inv: float,
) -> CreditResult:
    """Record the previous step in ``chain`` and trace its TD error backwards."""
    next_max_value = float(np.max(next_values))

    target = soft_bootstrap_target(
        bookkeeping.action_values,
        bookkeeping.greedy_action,
        reward,
        next_max_value,
        gamma,
        tau_inv,
    )
    td_error = temporal_difference_error(
        target,
        bookkeeping.action_values,
        bookkeeping.exploratory_action,
        q_alpha,
    )

    transition = Transition(
        state=bookkeeping.state,
        exploratory_action=bookkeeping.exploratory_action,
        greedy_action=bookkeeping.greedy_action,
        reward=reward,
        action_values=bookkeeping.action_values,
    )
    transition.action_values[bookkeeping.exploratory_action] += td_error

    chain.propagate(td_error, gamma * trace_lambda)
    evicted = chain.push(transition)

    return CreditResult(target=target, td_error=td_error, transition=transition, evicted=evicted)
