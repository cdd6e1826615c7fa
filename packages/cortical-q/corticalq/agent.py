"""
Discrete-action agent on top of a sparse feature hierarchy.

Key Features:
- **Population-code input**: continuous two-channel sensory frames become a sparse dot grid
- **Feature hierarchy**: a stack of feature stages turns the dots into sparse features
- **Condensed state**: block averages of the top stage give a small dense state vector
- **Soft TD targets with a trace**: each step's TD error is spread back over the replay chain
- **Minibatch rehearsal**: the value estimator is refit on sampled transitions every step
- **Epsilon-greedy control**: the post-rehearsal greedy action, or a random one

One call to :meth:`CorticalQAgent.step` runs the whole pipeline
(encode -> hierarchy -> condense -> evaluate -> credit assignment ->
rehearsal -> evaluate -> select) and returns the chosen action. The agent
owns its replay chain and previous-step bookkeeping; nothing is shared
between agent instances except what the caller passes in.
"""

from collections.abc import Sequence

import numpy as np

from corticalq.condenser import Condenser
from corticalq.credit import Bookkeeping, assign_credit
from corticalq.critic import MLPValueEstimator, ValueEstimator
from corticalq.dtypes import AgentConfig, AgentHistoryData, StepDiagnostics, StepParams
from corticalq.encoder import SparseInputEncoder
from corticalq.errors import ERROR_ESTIMATOR_SHAPE, ShapeMismatchError
from corticalq.hierarchy import FeatureHierarchy, FeatureStage, build_stages
from corticalq.logging_config import logger
from corticalq.policy import epsilon_greedy
from corticalq.rehearsal import RehearsalTrainer
from corticalq.replay import ReplayChain
from corticalq.utils.seeding import torch_generator_from


class CorticalQAgent:
    """Online value-learning agent with a sparse feature front end.

    Parameters
    ----------
    config : AgentConfig
        Shapes, replay and rehearsal sizes, estimator and stage settings.
    rng : np.random.Generator
        Generator used to initialise stages and estimator weights.
    stages : Sequence[FeatureStage] | None
        Prebuilt feature stages, one per descriptor in ``config.stages``.
        Built as spatial poolers when omitted.
    estimator : ValueEstimator | None
        Prebuilt value estimator. An MLP is built when omitted.

    Raises
    ------
    ShapeMismatchError
        If stages or estimator do not fit the shapes implied by ``config``.
    """

    def __init__(
        self,
        config: AgentConfig,
        rng: np.random.Generator,
        *,
        stages: Sequence[FeatureStage] | None = None,
        estimator: ValueEstimator | None = None,
    ) -> None:
        logger.info(f"Using configuration: {config}")

        self.config = config
        self.encoder = SparseInputEncoder(
            width=config.input_width,
            height=config.input_height,
            dots_width=config.input_dots_width,
            dots_height=config.input_dots_height,
            blob_radius=config.encode_blob_radius,
        )

        if stages is None:
            stages = build_stages(self.encoder.output_shape, config.stages, rng)
        self.hierarchy = FeatureHierarchy(self.encoder.output_shape, stages, config.stages)

        self.condenser = Condenser(
            self.hierarchy.output_shape,
            config.condense_width,
            config.condense_height,
        )

        if estimator is None:
            estimator = MLPValueEstimator(
                config.critic,
                self.condenser.state_size,
                config.num_actions,
                generator=torch_generator_from(rng),
            )
        if (
            estimator.num_inputs != self.condenser.state_size
            or estimator.num_outputs != config.num_actions
        ):
            error_message = ERROR_ESTIMATOR_SHAPE.format(
                estimator_inputs=estimator.num_inputs,
                estimator_outputs=estimator.num_outputs,
                state_size=self.condenser.state_size,
                num_actions=config.num_actions,
            )
            raise ShapeMismatchError(error_message)
        self.estimator = estimator

        self.replay_chain = ReplayChain(config.max_replay_chain_size)
        self.rehearsal = RehearsalTrainer(config.backprop_passes_critic, config.minibatch_size)
        self.bookkeeping = Bookkeeping.zeros(self.condenser.state_size, config.num_actions)

        self.latest_data: StepDiagnostics | None = None
        self.history_data = AgentHistoryData()
        self.step_count = 0

        logger.info(
            f"Agent ready: dots {self.encoder.output_shape}, {len(self.hierarchy)} stage(s), "
            f"state size {self.condenser.state_size}, {config.num_actions} actions",
        )

    @property
    def state_size(self) -> int:
        """Length of the condensed state vector."""
        return self.condenser.state_size

    @property
    def num_actions(self) -> int:
        """Number of discrete actions."""
        return self.config.num_actions

    def perceive(self, frame: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        """Encode ``frame``, run the feature hierarchy and condense its output."""
        dots = self.encoder.encode(frame)
        features = self.hierarchy.process(dots, rng)
        return self.condenser.condense(features)

    def step(  # noqa: PLR0913
        self,
        frame: np.ndarray,
        reward: float,
        params: StepParams,
        rng: np.random.Generator,
        condensed: np.ndarray | None = None,
    ) -> int:
        """
        Run one control step and return the chosen action.

        Args:
            frame: Sensory frame of shape ``(2, input_height, input_width)``.
            reward: Reward earned by the previously returned action.
            params: Learning, discount and exploration rates for this step.
            rng: The agent's generator, used for rehearsal sampling and exploration.
            condensed: Optional buffer that receives a copy of the condensed state.

        Returns
        -------
            Index of the chosen action
        """
        state = self.perceive(frame, rng)
        if condensed is not None:
            condensed[:] = state

        next_values = self.estimator.evaluate(state)

        credit = assign_credit(
            self.replay_chain,
            self.bookkeeping,
            reward,
            next_values,
            q_alpha=params.q_alpha,
            gamma=params.gamma,
            trace_lambda=params.trace_lambda,
            tau_inv=params.tau_inv,
        )

        loss = self.rehearsal.rehearse(
            self.estimator,
            self.replay_chain,
            rng,
            decay=params.rms_decay_critic,
            rate=params.backprop_alpha_critic,
            momentum=params.momentum_critic,
        )

        values = self.estimator.evaluate(state)
        chosen_action, greedy = epsilon_greedy(values, params.epsilon, rng)

        self.bookkeeping = Bookkeeping(
            state=state,
            action_values=values,
            greedy_action=greedy,
            exploratory_action=chosen_action,
        )
        self.step_count += 1

        self.latest_data = StepDiagnostics(
            reward=reward,
            target=credit.target,
            td_error=credit.td_error,
            greedy_action=greedy,
            chosen_action=chosen_action,
            greedy_value=float(values[greedy]),
            chosen_value=float(values[chosen_action]),
            rehearsal_loss=loss,
            replay_size=len(self.replay_chain),
        )
        self.history_data.record(self.latest_data, self.config.max_history_size)

        logger.debug(
            f"Step {self.step_count}: td_error={credit.td_error:.6f} "
            f"greedy_value={values[greedy]:.6f} chosen_value={values[chosen_action]:.6f}",
        )

        return chosen_action
