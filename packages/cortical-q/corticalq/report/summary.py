"""Console summary of agent sessions."""

from rich.console import Console
from rich.table import Table

from corticalq.runners import SessionResult


def summary_table(results: list[SessionResult], session_id: str) -> Table:
    """Build a table with one row per run plus an average row."""
    table = Table(title=f"Session {session_id}")
    table.add_column("Run", justify="right")
    table.add_column("Steps", justify="right")
    table.add_column("Total Reward", justify="right")
    table.add_column("Targets Reached", justify="right")
    table.add_column("Final |TD Error|", justify="right")

    for run, result in enumerate(results, start=1):
        final_error = abs(result.history.steps[-1].td_error) if result.history.steps else 0.0
        table.add_row(
            str(run),
            str(result.steps),
            f"{result.total_reward:.3f}",
            str(result.targets_reached),
            f"{final_error:.5f}",
        )

    if len(results) > 1:
        table.add_row(
            "avg",
            f"{sum(r.steps for r in results) / len(results):.1f}",
            f"{sum(r.total_reward for r in results) / len(results):.3f}",
            f"{sum(r.targets_reached for r in results) / len(results):.1f}",
            "",
        )
    return table


def summary(results: list[SessionResult], session_id: str, console: Console | None = None) -> None:
    """Print the session summary table."""
    (console or Console()).print(summary_table(results, session_id))
