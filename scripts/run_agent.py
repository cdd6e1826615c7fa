"""Run the cortical-q agent in the pursuit environment."""

import argparse
from datetime import UTC, datetime
from pathlib import Path

from corticalq.agent import CorticalQAgent
from corticalq.env import PursuitEnvironment
from corticalq.logging_config import LOG_LEVELS, logger, set_log_level
from corticalq.report.csv_export import export_session_to_csv
from corticalq.report.plots import plot_rewards, plot_value_diagnostics
from corticalq.report.summary import summary
from corticalq.runners import SessionResult, run_session
from corticalq.utils.config_loader import load_run_config, validate_run_config
from corticalq.utils.seeding import derive_run_seed, ensure_seed, get_rng, set_global_seed

DEFAULT_OUTPUT_DIR = Path("exports")


def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Run the cortical-q agent.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--steps",
        type=int,
        help="Number of steps per run (overrides the configuration file).",
    )
    parser.add_argument(
        "--runs",
        type=int,
        help="Number of independent runs (overrides the configuration file).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Base random seed (overrides the configuration file).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=LOG_LEVELS,
        help="Set the logging level (default: INFO). Use 'NONE' to disable logging.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory for CSV exports and plots (default: {DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip writing plots.",
    )
    return parser.parse_args()


def main() -> None:
    """Run the cortical-q agent."""
    args = parse_arguments()
    set_log_level(args.log_level)

    config = load_run_config(args.config)
    validate_run_config(config)

    steps = args.steps if args.steps is not None else config.steps
    runs = args.runs if args.runs is not None else config.runs
    base_seed = ensure_seed(args.seed if args.seed is not None else config.seed)

    session_id = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    logger.info(f"Session ID: {session_id}")
    logger.info(f"Config file: {args.config}")
    logger.info(f"Runs: {runs}, steps per run: {steps}, base seed: {base_seed}")

    output_dir = args.output_dir / session_id
    results: list[SessionResult] = []

    for run in range(runs):
        seed = derive_run_seed(base_seed, run)
        set_global_seed(seed)
        rng = get_rng(seed)

        agent = CorticalQAgent(config.agent, rng)
        environment = PursuitEnvironment(config.environment, rng)

        result = run_session(agent, environment, config.step, steps, rng)
        results.append(result)
        logger.info(
            f"Run {run + 1}/{runs} (seed {seed}): total reward {result.total_reward:.3f}, "
            f"targets reached {result.targets_reached}",
        )

        file_prefix = f"run_{run + 1}_"
        export_session_to_csv(result, output_dir, file_prefix)
        if not args.no_plots:
            plot_rewards(file_prefix, output_dir, result)
            plot_value_diagnostics(file_prefix, output_dir, result)

    summary(results, session_id)


if __name__ == "__main__":
    main()
