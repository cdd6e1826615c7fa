"""
Pursuit grid environment for the cortical-q agent.

The agent moves on a ``width x height`` grid towards a target. Reaching the
target pays a reward and respawns the target on another cell. Observations
are two-channel sensory frames: channel 0 is +1 on the agent's cell and -1
elsewhere, channel 1 is +1 on the target's cell and -1 elsewhere.
"""

from enum import Enum

import numpy as np
from pydantic import BaseModel, Field
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text as RichText

from corticalq.logging_config import logger

MIN_GRID_SIZE = 2

DEFAULT_GRID_WIDTH = 5
DEFAULT_GRID_HEIGHT = 5
DEFAULT_REWARD_GOAL = 1.0
DEFAULT_PENALTY_STEP = 0.01
DEFAULT_REWARD_DISTANCE_SCALE = 0.05


class Direction(Enum):
    """Moves available to the agent, in action-index order."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    STAY = "stay"


DIRECTIONS: list[Direction] = list(Direction)

_OFFSETS = {
    Direction.UP: (0, 1),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.STAY: (0, 0),
}


class PursuitConfig(BaseModel):
    """Configuration of the pursuit environment and its rewards."""

    width: int = Field(default=DEFAULT_GRID_WIDTH, ge=MIN_GRID_SIZE)
    height: int = Field(default=DEFAULT_GRID_HEIGHT, ge=MIN_GRID_SIZE)
    reward_goal: float = DEFAULT_REWARD_GOAL
    penalty_step: float = DEFAULT_PENALTY_STEP
    reward_distance_scale: float = DEFAULT_REWARD_DISTANCE_SCALE


class PursuitEnvironment:
    """
    Grid world in which the agent chases a relocating target.

    Attributes
    ----------
    agent_pos : tuple[int, int]
        Current ``(x, y)`` position of the agent.
    target_pos : tuple[int, int]
        Current ``(x, y)`` position of the target.
    targets_reached : int
        Number of times the target was reached.
    """

    def __init__(self, config: PursuitConfig, rng: np.random.Generator) -> None:
        self.config = config
        self.width = config.width
        self.height = config.height
        self.rng = rng
        self.agent_pos = (0, 0)
        self.target_pos = self._random_free_cell()
        self.targets_reached = 0

    @property
    def num_actions(self) -> int:
        """Number of discrete moves."""
        return len(DIRECTIONS)

    def _random_free_cell(self) -> tuple[int, int]:
        while True:
            cell = (int(self.rng.integers(0, self.width)), int(self.rng.integers(0, self.height)))
            if cell != self.agent_pos:
                return cell

    def distance_to_target(self) -> int:
        """Manhattan distance between agent and target."""
        return abs(self.target_pos[0] - self.agent_pos[0]) + abs(
            self.target_pos[1] - self.agent_pos[1],
        )

    def observe(self) -> np.ndarray:
        """Return the current ``(2, height, width)`` sensory frame."""
        frame = -np.ones((2, self.height, self.width))
        frame[0, self.agent_pos[1], self.agent_pos[0]] = 1.0
        frame[1, self.target_pos[1], self.target_pos[0]] = 1.0
        return frame

    def move_agent(self, action: int) -> float:
        """Apply action index ``action`` and return the reward it earned."""
        direction = DIRECTIONS[action]
        dx, dy = _OFFSETS[direction]
        previous_distance = self.distance_to_target()

        x = min(max(self.agent_pos[0] + dx, 0), self.width - 1)
        y = min(max(self.agent_pos[1] + dy, 0), self.height - 1)
        self.agent_pos = (x, y)

        if self.agent_pos == self.target_pos:
            self.targets_reached += 1
            logger.debug(f"Target reached at {self.target_pos}")
            self.target_pos = self._random_free_cell()
            return self.config.reward_goal

        progress = previous_distance - self.distance_to_target()
        return self.config.reward_distance_scale * progress - self.config.penalty_step

    def render(self) -> list[str]:
        """Render the grid as a list of lines, top row first."""
        console = Console(record=True, width=4 * self.width + 1, force_terminal=True)
        table = Table(show_header=False, show_lines=True, box=box.SQUARE, padding=(0, 0))
        for _ in range(self.width):
            table.add_column(justify="center", width=3, no_wrap=True)

        for y in reversed(range(self.height)):
            cells = []
            for x in range(self.width):
                if (x, y) == self.agent_pos:
                    cells.append(RichText("@", style="bold green"))
                elif (x, y) == self.target_pos:
                    cells.append(RichText("*", style="bold yellow"))
                else:
                    cells.append(RichText("."))
            table.add_row(*cells)

        with console.capture() as capture:
            console.print(table, crop=True)
        return [line.rstrip() for line in capture.get().splitlines() if line.strip()]
