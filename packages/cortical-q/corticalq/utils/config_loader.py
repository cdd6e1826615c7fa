"""Load and configure agent runs from a YAML file."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from corticalq.dtypes import AgentConfig, StepParams
from corticalq.env import DIRECTIONS, PursuitConfig
from corticalq.logging_config import logger

DEFAULT_STEPS = 1000


class RunConfig(BaseModel):
    """Everything needed to run an agent in the pursuit environment."""

    agent: AgentConfig
    step: StepParams = Field(default_factory=StepParams)
    environment: PursuitConfig = Field(default_factory=PursuitConfig)
    steps: int = Field(default=DEFAULT_STEPS, gt=0)
    runs: int = Field(default=1, gt=0)
    seed: int | None = None


def load_run_config(config_path: str | Path) -> RunConfig:
    """
    Load a run configuration from a YAML file and parse it into a RunConfig model.

    Args:
        config_path (str | Path): Path to the YAML configuration file.

    Returns
    -------
        RunConfig: Parsed configuration as a Pydantic model.
    """
    with Path(config_path).open() as file:
        data = yaml.safe_load(file)
    config = RunConfig(**data)
    logger.info(f"Loaded run configuration from {config_path}")
    return config


def validate_run_config(config: RunConfig) -> None:
    """Check that the agent and the environment agree on shapes and actions."""
    if config.agent.num_actions != len(DIRECTIONS):
        error_message = (
            f"The pursuit environment has {len(DIRECTIONS)} actions, "
            f"agent is configured with {config.agent.num_actions}."
        )
        logger.error(error_message)
        raise ValueError(error_message)
    if (config.agent.input_width, config.agent.input_height) != (
        config.environment.width,
        config.environment.height,
    ):
        error_message = (
            f"Agent input grid {config.agent.input_width}x{config.agent.input_height} does not "
            f"match environment grid {config.environment.width}x{config.environment.height}."
        )
        logger.error(error_message)
        raise ValueError(error_message)
