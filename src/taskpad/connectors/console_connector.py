# src/taskpad/connectors/console_connector.py

from __future__ import annotations

import logging
import shlex
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

# Foreground palettes: bright text for dark terminals, plain for light ones.
_PALETTE = {True: "\033[97m", False: "\033[30m"}
_RESET = "\033[0m"


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _paint(state: AppState, text: str) -> str:
    try:
        if not sys.stdout.isatty():
            return text
    except (AttributeError, ValueError):
        return text
    return f"{_PALETTE[bool(state.dark_mode)]}{text}{_RESET}"


def _print_ts(state: AppState, text: str) -> None:
    print(_paint(state, f"[{_ts_local()}] {text}"))


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (tasks=%s).", len(state.task_store))
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "taskpad"))
    _print_ts(state, f"[{app_name}] Use /help for commands, /list to see tasks, /exit to quit.\n")

    def emit(text: str) -> None:
        print(_paint(state, f"[{_ts_local()}] {text}"), flush=True)

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Bare text is a shortcut for /add.
            user_input = "/add " + shlex.quote(user_input)

        try:
            with state.lock:
                cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts(state, cmd_response)

    logger.info("Console connector finished.")
