# src/taskpad/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the overdue checker in a background thread (optional),
- the console REPL in the main thread.
"""

from __future__ import annotations

import logging
import signal
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_scheduler import OverdueBackgroundRunner, start_overdue_checker_in_background

logger = logging.getLogger(__name__)


def _handle_sigterm(signum, _frame) -> None:
    logger.info("Signal %s received, shutting down...", signum)
    # Unwinds the REPL the same way Ctrl+C does.
    raise KeyboardInterrupt


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (log file %s)...", settings.app_name, log_file)

    state = create_initial_state(settings=settings)

    # SIGTERM is not available everywhere (e.g. some Windows setups).
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handle_sigterm)

    runner: OverdueBackgroundRunner | None = start_overdue_checker_in_background(state)

    try:
        run_console_loop(state)
    except KeyboardInterrupt:
        print()
    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=5.0)
        logger.info("Bye.")


if __name__ == "__main__":
    sys.exit(main())
