"""Configuration and diagnostics models for the cortical-q agent."""

from pydantic import BaseModel, ConfigDict, Field

from corticalq.critic import MLPValueEstimatorConfig
from corticalq.encoder import DEFAULT_BLOB_RADIUS
from corticalq.hierarchy import StageDescriptor
from corticalq.rehearsal import DEFAULT_BACKPROP_PASSES, DEFAULT_MINIBATCH_SIZE
from corticalq.replay import DEFAULT_MAX_REPLAY_CHAIN_SIZE

DEFAULT_Q_ALPHA = 0.5
DEFAULT_BACKPROP_ALPHA_CRITIC = 0.005
DEFAULT_RMS_DECAY_CRITIC = 0.9
DEFAULT_MOMENTUM_CRITIC = 0.0
DEFAULT_GAMMA = 0.95
DEFAULT_LAMBDA = 0.9
DEFAULT_TAU_INV = 0.5
DEFAULT_EPSILON = 0.05
DEFAULT_WEIGHT_DECAY_MULTIPLIER = 1.0
DEFAULT_MAX_HISTORY_SIZE = 10_000


class AgentConfig(BaseModel):
    """Structure of a cortical-q agent."""

    input_width: int = Field(gt=0)
    input_height: int = Field(gt=0)
    input_dots_width: int = Field(gt=0)
    input_dots_height: int = Field(gt=0)
    condense_width: int = Field(gt=0)
    condense_height: int = Field(gt=0)
    num_actions: int = Field(gt=0)

    encode_blob_radius: int = Field(default=DEFAULT_BLOB_RADIUS, ge=0)
    max_replay_chain_size: int = Field(default=DEFAULT_MAX_REPLAY_CHAIN_SIZE, gt=0)
    backprop_passes_critic: int = Field(default=DEFAULT_BACKPROP_PASSES, ge=0)
    minibatch_size: int = Field(default=DEFAULT_MINIBATCH_SIZE, gt=0)
    # None keeps the diagnostics of every step
    max_history_size: int | None = Field(default=DEFAULT_MAX_HISTORY_SIZE, gt=0)

    critic: MLPValueEstimatorConfig = Field(default_factory=MLPValueEstimatorConfig)
    stages: list[StageDescriptor] = Field(default_factory=list)


class StepParams(BaseModel):
    """Per-step learning, discount and exploration rates.

    ``lambda`` is a Python keyword, so the trace decay lives in ``trace_lambda``
    and is also accepted under the alias ``lambda``. ``weight_decay_multiplier``
    is accepted but currently has no effect.
    """

    model_config = ConfigDict(populate_by_name=True)

    q_alpha: float = DEFAULT_Q_ALPHA
    backprop_alpha_critic: float = DEFAULT_BACKPROP_ALPHA_CRITIC
    rms_decay_critic: float = DEFAULT_RMS_DECAY_CRITIC
    momentum_critic: float = DEFAULT_MOMENTUM_CRITIC
    gamma: float = DEFAULT_GAMMA
    trace_lambda: float = Field(default=DEFAULT_LAMBDA, alias="lambda")
    tau_inv: float = DEFAULT_TAU_INV
    epsilon: float = DEFAULT_EPSILON
    weight_decay_multiplier: float = DEFAULT_WEIGHT_DECAY_MULTIPLIER


class StepDiagnostics(BaseModel):
    """Observability output of one agent step."""

    reward: float = Field(description="Reward passed to the step.")
    target: float = Field(description="Soft bootstrapped target for the previous greedy action.")
    td_error: float = Field(description="Scaled temporal-difference error.")
    greedy_action: int = Field(description="Greedy action after rehearsal.")
    chosen_action: int = Field(description="Action returned to the caller.")
    greedy_value: float = Field(description="Post-rehearsal value of the greedy action.")
    chosen_value: float = Field(description="Post-rehearsal value of the chosen action.")
    rehearsal_loss: float = Field(description="Mean sample loss of the last rehearsal pass.")
    replay_size: int = Field(description="Replay chain length after the step.")


class AgentHistoryData(BaseModel):
    """Diagnostics of the most recent steps.

    ``dropped`` counts the oldest entries discarded to respect the size limit,
    so ``steps[i]`` belongs to step number ``dropped + i + 1``.
    """

    steps: list[StepDiagnostics] = Field(default_factory=list)
    dropped: int = 0

    def record(self, diagnostics: StepDiagnostics, max_size: int | None = None) -> None:
        """Append ``diagnostics``, discarding the oldest entries beyond ``max_size``."""
        self.steps.append(diagnostics)
        if max_size is not None and len(self.steps) > max_size:
            excess = len(self.steps) - max_size
            del self.steps[:excess]
            self.dropped += excess

    def step_numbers(self) -> list[int]:
        """Return the step number of every retained entry."""
        return list(range(self.dropped + 1, self.dropped + len(self.steps) + 1))

    def series(self, name: str) -> list[float]:
        """Return one diagnostics field across all steps."""
        return [getattr(step, name) for step in self.steps]
