# src/boardflow/config.py

from __future__ import annotations

"""
Settings for the console board, read from BOARDFLOW_* environment variables.

A .env file in the working directory is loaded first; real environment
variables win over it. Nothing here is required: every value has a default
that gives a single-user local board.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "BOARDFLOW"
ROLES = ("admin", "editor", "viewer")

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}

load_dotenv(override=False)


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(suffix: str, default: str) -> str:
    """Stripped value of BOARDFLOW_<suffix>; blank counts as unset."""
    raw = (os.getenv(_k(suffix)) or "").strip()
    return raw or default


def _env_flag(suffix: str, default: bool) -> bool:
    raw = _env(suffix, "").lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return default


def _env_dir(suffix: str, default: Path) -> Path:
    raw = _env(suffix, "")
    return Path(raw).expanduser() if raw else default


@dataclass(frozen=True, slots=True)
class Settings:
    app_name: str
    log_level: str

    # Acting user. The console has no login: the board runs as this user.
    username: str
    user_role: str
    default_project: str

    # Local data (gitignored).
    data_dir: Path
    snapshot_path: Path
    save_snapshot: bool

    @staticmethod
    def from_env() -> "Settings":
        role = _env("USER_ROLE", "admin").lower()
        if role not in ROLES:
            # Unknown roles get the least privilege.
            role = "viewer"

        data_dir = _env_dir("DATA_DIR", Path(".local/boardflow"))
        return Settings(
            app_name=_env("APP_NAME", "boardflow"),
            log_level=_env("LOG_LEVEL", "WARNING").upper(),
            username=_env("USERNAME", "demo"),
            user_role=role,
            default_project=_env("DEFAULT_PROJECT", "My Board"),
            data_dir=data_dir,
            snapshot_path=_env_dir("SNAPSHOT_PATH", data_dir / "board.json"),
            save_snapshot=_env_flag("SAVE_SNAPSHOT", True),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
