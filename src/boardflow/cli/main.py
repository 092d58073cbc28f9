# src/boardflow/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds BoardState, then runs the console REPL.
The board snapshot is written back on exit.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_board, create_initial_state, save_snapshot
from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier, run_console_loop
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(
        log_dir=settings.data_dir,
        console_level=level_from_name(settings.log_level),
    )
    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    state = create_initial_state(settings=settings)
    board = create_board(state, notifier=ConsoleNotifier())

    try:
        run_console_loop(board)
    finally:
        save_snapshot(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
