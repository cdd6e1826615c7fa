"""Online discrete-action value learning on sparse hierarchical features."""

from corticalq.agent import CorticalQAgent
from corticalq.dtypes import AgentConfig, StepDiagnostics, StepParams

__all__ = [
    "AgentConfig",
    "CorticalQAgent",
    "StepDiagnostics",
    "StepParams",
]
