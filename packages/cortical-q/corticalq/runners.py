"""Agent-environment loop."""

import numpy as np
from pydantic import BaseModel, Field

from corticalq.agent import CorticalQAgent
from corticalq.dtypes import AgentHistoryData, StepParams
from corticalq.env import PursuitEnvironment
from corticalq.logging_config import logger
from corticalq.tracker import SessionTracker

LOG_INTERVAL = 100


class SessionResult(BaseModel):
    """Outcome of one run of :func:`run_session`."""

    steps: int
    total_reward: float
    targets_reached: int
    rewards: list[float] = Field(default_factory=list)
    history: AgentHistoryData = Field(default_factory=AgentHistoryData)


def run_session(
    agent: CorticalQAgent,
    environment: PursuitEnvironment,
    params: StepParams,
    num_steps: int,
    rng: np.random.Generator,
) -> SessionResult:
    """
    Let ``agent`` act in ``environment`` for ``num_steps`` steps.

    The reward earned by an action is handed to the agent on the following
    step, together with the observation that action produced.
    """
    tracker = SessionTracker()
    reward = 0.0

    for step in range(num_steps):
        action = agent.step(environment.observe(), reward, params, rng)

        reached_before = environment.targets_reached
        reward = environment.move_agent(action)
        tracker.track_step(reward, target_reached=environment.targets_reached > reached_before)

        if (step + 1) % LOG_INTERVAL == 0:
            logger.info(
                f"Step {step + 1}/{num_steps}: total reward {tracker.total_reward:.3f}, "
                f"targets reached {tracker.data.targets_reached}",
            )

    return SessionResult(
        steps=tracker.steps,
        total_reward=tracker.total_reward,
        targets_reached=tracker.data.targets_reached,
        rewards=tracker.data.rewards,
        history=agent.history_data,
    )
