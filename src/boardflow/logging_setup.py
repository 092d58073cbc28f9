# src/boardflow/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "boardflow.log"

# Loggers whose records are per-card rule/ordering detail. The service turns
# their outcomes into notices, so the console only shows their warnings.
_QUIET_PREFIXES = ("boardflow.tasks.",)


def level_from_name(name: str | None, default: int = logging.WARNING) -> int:
    """Map "info"/"DEBUG"/"20" to a logging level; unknown names give default."""
    if not name:
        return default
    raw = name.strip().upper()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the REPL readable:
    - boardflow records pass, except rule/ordering chatter below WARNING
    - 'py.warnings' and third-party records only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(_QUIET_PREFIXES):
            return record.levelno >= logging.WARNING
        if name == "boardflow" or name.startswith("boardflow."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/boardflow",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console handler (filtered) on stderr plus a full debug log file in log_dir.

    Call once, before the first board operation. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    to_file = logging.FileHandler(log_file, encoding="utf-8")
    to_file.setLevel(file_level)
    to_file.setFormatter(fmt)
    root.addHandler(to_file)

    logging.captureWarnings(True)
    return log_file
