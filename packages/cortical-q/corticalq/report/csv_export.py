"""CSV export functions for agent session data."""

import csv
from pathlib import Path

from corticalq.logging_config import logger
from corticalq.runners import SessionResult

STEP_FIELDNAMES = [
    "step",
    "reward",
    "target",
    "td_error",
    "greedy_action",
    "chosen_action",
    "greedy_value",
    "chosen_value",
    "rehearsal_loss",
    "replay_size",
]


def export_session_to_csv(
    result: SessionResult,
    data_dir: Path,
    file_prefix: str = "",
) -> Path:
    """
    Export per-step diagnostics of a session to CSV.

    Args:
        result (SessionResult): Session to export.
        data_dir (Path): Directory to save the CSV file.
        file_prefix (str): Prefix for the output file name.

    Returns
    -------
        Path: The written file.
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    filepath = data_dir / f"{file_prefix}steps.csv"

    with filepath.open("w", newline="") as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=STEP_FIELDNAMES)
        writer.writeheader()
        history = result.history
        for index, diagnostics in zip(history.step_numbers(), history.steps, strict=True):
            writer.writerow({"step": index, **diagnostics.model_dump()})

    logger.info(f"Step diagnostics exported to {filepath}")
    return filepath
