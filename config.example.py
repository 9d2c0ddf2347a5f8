# config.example.py

"""
Documentation-only module (safe to commit).

gtd-sync is configured from environment variables (optionally via a local .env file,
gitignored). Every variable has a default; none is required.

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "GTD_APP_NAME": "App display name (default: gtd-sync).",
    "GTD_LOG_LEVEL": "Console logging level (default: INFO).",
    "GTD_CONSOLE_ENABLED": "Start the interactive console (true/false, default: true).",
    # Vault layout
    "GTD_VAULT_DIR": "Root directory of the markdown vault (default: current directory).",
    "GTD_TASK_DIRECTORY": "Vault-relative folder for task notes (default: GTD/Tasks).",
    "GTD_SEARCH_DIRECTORIES": "Comma separated folders scanned for #TODO lines (empty => whole vault).",
    # Paths (gitignored)
    "GTD_DATA_DIR": "Local data directory (default: .local/gtd).",
    "GTD_STATE_PATH": "Sync state JSON path (default: <data_dir>/data.json).",
    # Periodic operations (true/false)
    "GTD_AUTO_CREATE_FROM_TODO": "Periodically create tasks from new #TODO lines.",
    "GTD_AUTO_UPDATE_CHECKBOX": "Periodically check #TODO boxes of completed tasks.",
    "GTD_AUTO_UPDATE_SCHEDULE": "Periodically move overdue scheduled dates to today.",
    "GTD_AUTO_DELETE_COMPLETED": "Periodically delete completed tasks.",
    "GTD_AUTO_DELETE_TRASH": "Periodically delete trash tasks.",
    # Intervals in hours, clamped to 1..168
    "GTD_AUTO_CREATE_FROM_TODO_INTERVAL": "Default: 1.",
    "GTD_AUTO_UPDATE_CHECKBOX_INTERVAL": "Default: 1.",
    "GTD_AUTO_UPDATE_SCHEDULE_INTERVAL": "Default: 24.",
    "GTD_AUTO_DELETE_COMPLETED_INTERVAL": "Default: 24.",
    "GTD_AUTO_DELETE_TRASH_INTERVAL": "Default: 24.",
}
