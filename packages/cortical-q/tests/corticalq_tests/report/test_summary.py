"""Tests for the console summary and plot helpers."""

import numpy as np
from corticalq.report.plots import running_average
from corticalq.report.summary import summary, summary_table
from corticalq.runners import SessionResult
from rich.console import Console


def make_result(total_reward: float, targets: int) -> SessionResult:
    return SessionResult(steps=10, total_reward=total_reward, targets_reached=targets)


class TestSummaryTable:
    """Test cases for summary_table."""

    def test_single_run(self):
        """Test that a single run has no average row."""
        table = summary_table([make_result(1.5, 2)], "abc")

        assert table.row_count == 1
        assert table.title == "Session abc"

    def test_average_row(self):
        """Test that several runs get an extra average row."""
        table = summary_table([make_result(1.0, 2), make_result(3.0, 4)], "abc")

        assert table.row_count == 3
        assert list(table.columns[2].cells)[-1] == "2.000"
        assert list(table.columns[3].cells)[-1] == "3.0"

    def test_summary_prints(self):
        """Test that the summary is written to the console."""
        console = Console(record=True, width=120)

        summary([make_result(1.0, 2)], "xyz", console=console)

        assert "Session xyz" in console.export_text()


class TestRunningAverage:
    """Test cases for running_average."""

    def test_partial_windows(self):
        """Test that the first entries average over what is available."""
        np.testing.assert_allclose(running_average([1.0, 3.0, 5.0, 7.0], 2), [1.0, 2.0, 4.0, 6.0])

    def test_empty(self):
        """Test an empty series."""
        assert running_average([], 5).size == 0
