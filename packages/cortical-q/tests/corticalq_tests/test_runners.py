"""Tests for the agent-environment loop."""

import numpy as np
import pytest
from corticalq.agent import CorticalQAgent
from corticalq.dtypes import AgentConfig, StepParams
from corticalq.env import PursuitConfig, PursuitEnvironment
from corticalq.hierarchy import StageDescriptor
from corticalq.runners import SessionResult, run_session
from corticalq.utils.seeding import get_rng


@pytest.fixture
def pursuit_config():
    """Agent sized for a 3x3 pursuit grid."""
    return AgentConfig(
        input_width=3,
        input_height=3,
        input_dots_width=2,
        input_dots_height=2,
        condense_width=2,
        condense_height=2,
        num_actions=5,
        max_replay_chain_size=50,
        backprop_passes_critic=2,
        minibatch_size=4,
        stages=[
            StageDescriptor(
                region_width=6,
                region_height=6,
                connection_radius=2.0,
                inhibition_radius=1,
                min_overlap=1,
            ),
        ],
    )


def run(config: AgentConfig, seed: int, num_steps: int) -> SessionResult:
    rng = get_rng(seed)
    agent = CorticalQAgent(config, rng)
    environment = PursuitEnvironment(PursuitConfig(width=3, height=3), get_rng(seed + 1))
    return run_session(agent, environment, StepParams(epsilon=0.2), num_steps, rng)


class TestRunSession:
    """Test cases for run_session."""

    def test_session_totals(self, pursuit_config):
        """Test that the result covers every step."""
        result = run(pursuit_config, seed=0, num_steps=30)

        assert result.steps == 30
        assert len(result.rewards) == 30
        assert len(result.history.steps) == 30
        assert result.total_reward == pytest.approx(sum(result.rewards))
        assert result.targets_reached >= 0

    def test_rewards_delivered_one_step_late(self, pursuit_config):
        """Test that each action's reward is passed to the next agent step."""
        result = run(pursuit_config, seed=1, num_steps=10)

        assert result.history.series("reward")[0] == 0.0
        np.testing.assert_allclose(result.history.series("reward")[1:], result.rewards[:-1])

    def test_reproducible(self, pursuit_config):
        """Test that equal seeds give equal sessions."""
        first = run(pursuit_config, seed=4, num_steps=20)
        second = run(pursuit_config, seed=4, num_steps=20)

        assert first.rewards == second.rewards
        assert first.history.series("chosen_action") == second.history.series("chosen_action")
