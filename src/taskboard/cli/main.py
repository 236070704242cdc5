# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (which loads the task store), runs the console
REPL, then closes the store.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..logging_setup import setup_logging
from ..tasks.task_errors import TaskStoreError
from .console import run_console_loop

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        state = create_initial_state(settings=settings)
    except TaskStoreError:
        logger.exception("Could not open the task store at %s", settings.tasks_path)
        return 1

    try:
        run_console_loop(state)
    finally:
        state.task_store.close()
        logger.info("Bye.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
