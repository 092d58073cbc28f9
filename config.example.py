# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
See src/boardflow/config.py for how each value is parsed.
"""

ENV_VARS = {
    # App / logging
    "BOARDFLOW_APP_NAME": "App display name (default: boardflow).",
    "BOARDFLOW_LOG_LEVEL": "Console logging level (default: WARNING).",
    # Acting user
    "BOARDFLOW_USERNAME": "Username the console acts as (default: demo).",
    "BOARDFLOW_USER_ROLE": "admin, editor or viewer (default: admin).",
    "BOARDFLOW_DEFAULT_PROJECT": "Project created when the user has none (default: My Board).",
    # Paths (gitignored)
    "BOARDFLOW_DATA_DIR": "Local data directory (default: .local/boardflow).",
    "BOARDFLOW_SNAPSHOT_PATH": "Board JSON snapshot path (default: <data_dir>/board.json).",
    # Switches
    "BOARDFLOW_SAVE_SNAPSHOT": "Load the snapshot on start and write it on exit (true/false).",
}
