# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from boardflow.logging_setup import _ConsoleNoiseFilter, level_from_name, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("boardflow.core.board", logging.INFO, True),
        ("boardflow.tasks.automation", logging.DEBUG, False),
        ("boardflow.tasks.automation", logging.WARNING, True),
        ("py.warnings", logging.WARNING, False),
        ("urllib3", logging.WARNING, False),
        ("urllib3", logging.ERROR, True),
    ],
)
def test_console_filter(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, logging.WARNING), ("info", logging.INFO), (" DEBUG ", logging.DEBUG), ("15", 15), ("loud", logging.WARNING)],
)
def test_level_from_name(raw: str | None, expected: int) -> None:
    assert level_from_name(raw) == expected


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs")
        logging.getLogger("boardflow.tasks.ordering").debug("placed card")
        for h in root.handlers:
            h.flush()
        assert "placed card" in log_file.read_text("utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
        logging.captureWarnings(False)
