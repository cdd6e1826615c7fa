"""Plotting functions for agent sessions."""

from pathlib import Path

import numpy as np
from matplotlib import pyplot as plt

from corticalq.runners import SessionResult


def running_average(values: list[float], window: int) -> np.ndarray:
    """Trailing mean of ``values`` over at most ``window`` samples."""
    data = np.asarray(values, dtype=np.float64)
    if data.size == 0:
        return data
    cumulative = np.cumsum(np.insert(data, 0, 0.0))
    starts = np.maximum(np.arange(1, data.size + 1) - window, 0)
    counts = np.arange(1, data.size + 1) - starts
    return (cumulative[1:] - cumulative[starts]) / counts


def plot_rewards(  # pragma: no cover
    file_prefix: str,
    plot_dir: Path,
    result: SessionResult,
    window: int = 50,
) -> None:
    """
    Plot per-step rewards with their running average and save the plot.

    Args:
        file_prefix (str): Prefix for the output file name.
        plot_dir (Path): Directory to save the plot.
        result (SessionResult): Session to plot.
        window (int): Running average window.
    """
    steps = np.arange(1, len(result.rewards) + 1)
    plt.figure(figsize=(10, 6))
    plt.plot(steps, result.rewards, alpha=0.3, label="Reward")
    plt.plot(steps, running_average(result.rewards, window), label=f"Running Average ({window})")
    plt.title("Reward per Step")
    plt.xlabel("Step")
    plt.ylabel("Reward")
    plt.legend()
    plt.grid()
    plt.savefig(plot_dir / f"{file_prefix}rewards.png")
    plt.close()


def plot_value_diagnostics(  # pragma: no cover
    file_prefix: str,
    plot_dir: Path,
    result: SessionResult,
) -> None:
    """
    Plot TD error and greedy/chosen action values over the session and save the plot.

    Args:
        file_prefix (str): Prefix for the output file name.
        plot_dir (Path): Directory to save the plot.
        result (SessionResult): Session to plot.
    """
    history = result.history
    steps = history.step_numbers()

    _, (ax_error, ax_value) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)
    ax_error.plot(steps, history.series("td_error"), label="TD Error")
    ax_error.set_ylabel("TD Error")
    ax_error.grid()
    ax_error.legend()

    ax_value.plot(steps, history.series("greedy_value"), label="Greedy Value")
    ax_value.plot(steps, history.series("chosen_value"), alpha=0.6, label="Chosen Value")
    ax_value.set_xlabel("Step")
    ax_value.set_ylabel("Action Value")
    ax_value.grid()
    ax_value.legend()

    plt.suptitle("Value Diagnostics")
    plt.savefig(plot_dir / f"{file_prefix}value_diagnostics.png")
    plt.close()
