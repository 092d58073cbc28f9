# src/boardflow/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.board import BoardService
from ..core.ports import NoticeKind

logger = logging.getLogger(__name__)

_NOTICE_PREFIX: dict[NoticeKind, str] = {
    NoticeKind.SUCCESS: "[OK]",
    NoticeKind.ERROR: "[ERROR]",
    NoticeKind.AUTOMATION: "[AUTOMATION]",
    NoticeKind.ASSIGNEE: "[NOTIFY]",
    NoticeKind.SCHEDULE: "[SCHEDULE]",
}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


class ConsoleNotifier:
    """Notifier port that prints notices as timestamped console lines."""

    def notify(self, *, kind: NoticeKind, text: str) -> None:
        _print_ts(f"{_NOTICE_PREFIX.get(kind, '[INFO]')} {text}")


def run_console_loop(board: BoardService) -> None:
    logger.info("Console connector started (user=%s).", board.user.username)
    _print_ts("[CONSOLE] Use /help for commands, /board to see the board, /exit to quit.\n")

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

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

        try:
            reply = command_registry.handle(board, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is None:
            reply = "Commands start with '/'. Use /help to list them."
        print(reply)

    logger.info("Console connector finished.")
