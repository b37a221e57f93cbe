"""
Centralized filesystem paths for runtime data.
"""
import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent


def get_data_dir() -> Path:
    """
    Return runtime data directory.

    Priority:
    1. HABIT_LEDGER_DATA_DIR env var
    2. <project_root>/data
    """
    raw = os.getenv("HABIT_LEDGER_DATA_DIR", "").strip()
    if raw:
        return Path(raw).expanduser()
    return PROJECT_ROOT / "data"


DATA_DIR = get_data_dir()
LEDGER_PATH = DATA_DIR / "ledger.json"


def get_logs_dir() -> Path:
    """HABIT_LEDGER_LOG_DIR env var, else <project_root>/logs."""
    raw = os.getenv("HABIT_LEDGER_LOG_DIR", "").strip()
    if raw:
        return Path(raw).expanduser()
    return PROJECT_ROOT / "logs"


LOGS_DIR = get_logs_dir()
