"""Session tracking for the cortical-q agent."""

from pydantic import BaseModel, Field


class SessionData(BaseModel):
    """Totals accumulated over one session."""

    steps: int = 0
    total_reward: float = 0.0
    targets_reached: int = 0
    rewards: list[float] = Field(default_factory=list)


class SessionTracker:
    """Tracks data across a single agent-environment session."""

    def __init__(self) -> None:
        self.data = SessionData()

    @property
    def steps(self) -> int:
        """Get the number of steps taken."""
        return self.data.steps

    @property
    def total_reward(self) -> float:
        """Get the cumulative reward."""
        return self.data.total_reward

    def track_step(self, reward: float, *, target_reached: bool = False) -> None:
        """Track a single step.

        Parameters
        ----------
        reward : float
            Reward received for this step.
        target_reached : bool
            Whether the step reached the target.
        """
        self.data.steps += 1
        self.data.total_reward += reward
        self.data.rewards.append(reward)
        if target_reached:
            self.data.targets_reached += 1

    def reset(self) -> None:
        """Start a new session."""
        self.data = SessionData()
