import numpy as np
import pytest
from corticalq.dtypes import AgentConfig, StepParams
from corticalq.hierarchy import StageDescriptor
from corticalq.utils.seeding import get_rng


class LinearSGDEstimator:
    """Linear value estimator trained with plain gradient descent.

    Implements the value estimator interface with a convex model so that
    learning dynamics can be asserted exactly.
    """

    def __init__(self, input_dim: int, num_actions: int) -> None:
        self.num_inputs = input_dim
        self.num_outputs = num_actions
        self.weights = np.zeros((num_actions, input_dim))
        self.bias = np.zeros(num_actions)
        self.grad_weights = np.zeros_like(self.weights)
        self.grad_bias = np.zeros_like(self.bias)
        self.steps_applied = 0

    def evaluate(self, state):
        return np.asarray(state, dtype=np.float64) @ self.weights.T + self.bias

    def begin_gradient_accumulation(self):
        self.grad_weights[:] = 0.0
        self.grad_bias[:] = 0.0

    def accumulate_gradient(self, state, target):
        states = np.atleast_2d(np.asarray(state, dtype=np.float64))
        targets = np.atleast_2d(np.asarray(target, dtype=np.float64))
        error = states @ self.weights.T + self.bias - targets
        self.grad_weights += error.T @ states
        self.grad_bias += error.sum(axis=0)
        return float(0.5 * (error**2).sum())

    def scale_accumulated_gradient(self, factor):
        self.grad_weights *= factor
        self.grad_bias *= factor

    def apply_gradient_step(self, decay, rate, momentum):  # noqa: ARG002
        self.weights -= rate * self.grad_weights
        self.bias -= rate * self.grad_bias
        self.steps_applied += 1


@pytest.fixture
def linear_estimator_factory():
    """Build linear SGD estimators for a given input and action count."""
    return LinearSGDEstimator


@pytest.fixture
def rng():
    """Seeded generator shared by one test."""
    return get_rng(1234)


@pytest.fixture
def small_stage():
    """Small spatial pooler stage descriptor."""
    return StageDescriptor(
        region_width=6,
        region_height=6,
        connection_radius=3.0,
        inhibition_radius=1,
        min_overlap=1,
        desired_local_activity=2,
    )


@pytest.fixture
def small_config(small_stage):
    """Agent on a 3x3 input grid with one 6x6 stage condensed to 2x2."""
    return AgentConfig(
        input_width=3,
        input_height=3,
        input_dots_width=3,
        input_dots_height=3,
        condense_width=3,
        condense_height=3,
        num_actions=3,
        max_replay_chain_size=20,
        backprop_passes_critic=3,
        minibatch_size=4,
        stages=[small_stage],
    )


@pytest.fixture
def step_params():
    """Step parameters with moderate rates."""
    return StepParams(
        q_alpha=0.5,
        backprop_alpha_critic=0.01,
        rms_decay_critic=0.9,
        momentum_critic=0.0,
        gamma=0.9,
        trace_lambda=0.5,
        tau_inv=0.5,
        epsilon=0.1,
    )
