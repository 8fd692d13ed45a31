# src/taskdeck/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, runs the console REPL and flushes
pending snapshot writes on exit.
"""

from __future__ import annotations

import logging
import signal

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    # TASKDECK_LOG_LEVEL drives the console; the log file always gets DEBUG.
    setup_logging(log_dir=settings.log_dir, console_level=level_from_name(settings.log_level))

    logger.info("Starting %s...", settings.app_name)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    def _handle_sigterm(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGTERM, _handle_sigterm)
    except (AttributeError, ValueError):
        # Not available on this platform / not in the main thread.
        pass

    try:
        run_console_loop(state)
    except KeyboardInterrupt:
        pass
    finally:
        shutdown_state(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
