"""
Logging for the cortical-q package.

Every module logs through the ``corticalq`` logger. Outside of test runs the
records go to ``logs/agent_<timestamp>.log`` under the working directory;
under pytest only warnings and errors reach stderr.
"""

import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

LOGGER_NAME = "corticalq"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "NONE")

logger = logging.getLogger(LOGGER_NAME)


def _running_under_pytest() -> bool:
    # PYTEST_CURRENT_TEST is only exported once a test starts, after collection imports us
    return (
        "PYTEST_CURRENT_TEST" in os.environ
        or os.environ.get("TESTING") == "1"
        or "pytest" in sys.modules
        or bool(sys.argv and sys.argv[0].endswith("pytest"))
    )


def _attach_file_handler(log_dir: Path) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"agent_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S')}.log"

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


def set_log_level(level: str) -> None:
    """Set the level of the package logger and its handlers; ``NONE`` silences it."""
    level = level.upper()
    if level not in LOG_LEVELS:
        error_message = f"Unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}."
        raise ValueError(error_message)

    if level == "NONE":
        logger.disabled = True
        return
    logger.disabled = False
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


if _running_under_pytest():
    logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)
else:
    try:
        _attach_file_handler(Path.cwd() / "logs")
    except OSError as exc:
        logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)
        logger.warning(
            "Failed to initialize file logging: %s. Falling back to stderr logging.",
            exc,
        )

logging.getLogger("matplotlib").setLevel(logging.WARNING)
