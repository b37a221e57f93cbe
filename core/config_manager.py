"""
Configuration Manager for Habit Ledger.

Central place for system constants and tunables.
Every tunable is declared explicitly here and can be overridden.

Usage:
    from core.config_manager import config
    window = config.HEATMAP_WINDOW_DAYS
"""
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from core.exceptions import ConfigError


CONFIG_DIR = Path(__file__).parent.parent / "config"
RUNTIME_CONFIG_PATH = CONFIG_DIR / "runtime.yaml"
ENV_PREFIX = "HABIT_LEDGER_"


@dataclass
class SystemConfig:
    """
    Runtime constants.

    Override via config/runtime.yaml or HABIT_LEDGER_<NAME> env vars.
    """

    # === Week matrix ===

    # Slots per task, index 0 = Monday
    DAYS_PER_WEEK: int = 7

    # What happens to completions when a new ISO week starts:
    # "iso_week_reset" clears them, "never" keeps them forever
    WEEK_ROLLOVER_POLICY: str = "iso_week_reset"

    # === Heatmap ===

    # Trailing window length for the lightweight heatmap
    HEATMAP_WINDOW_DAYS: int = 28

    # === Ledger Store ===

    # Base URL of the CRUD API
    API_URL: str = "http://localhost:3001/api"

    # Seconds before a store request is abandoned
    REQUEST_TIMEOUT: float = 10.0

    # Fixed key the local variant stores its snapshot under
    STORAGE_KEY: str = "habit-data"

    # === Reconciliation ===

    # Confirmation failure policy: "swallow" | "retry" | "rollback"
    CONFIRMATION_POLICY: str = "swallow"

    # Only used by the retry policy
    RETRY_ATTEMPTS: int = 3
    RETRY_DELAY_SECONDS: float = 0.5

    # === Logging ===

    # Threshold for logs/system.log and for stderr (level name)
    LOG_LEVEL: str = "INFO"
    CONSOLE_LOG_LEVEL: str = "WARNING"


def _load_runtime_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load runtime overrides if the file exists."""
    target = path or RUNTIME_CONFIG_PATH
    if not target.exists():
        return {}

    try:
        with open(target, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Cannot read runtime config: {e}", str(target)) from e

    if not isinstance(data, dict):
        raise ConfigError("Runtime config must be a mapping", str(target))
    return data


def _coerce(raw: str, default: Any) -> Any:
    if isinstance(default, bool):
        return raw.strip().lower() in {"1", "true", "yes"}
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def get_config(path: Optional[Path] = None) -> SystemConfig:
    """
    Build the configuration.

    Priority: env vars > runtime.yaml > defaults
    """
    base = SystemConfig()
    overrides = _load_runtime_config(path)

    for key, value in overrides.items():
        if hasattr(base, key):
            setattr(base, key, value)

    for f in fields(base):
        raw = os.getenv(f"{ENV_PREFIX}{f.name}")
        if raw is None:
            continue
        try:
            setattr(base, f.name, _coerce(raw, getattr(base, f.name)))
        except ValueError as e:
            raise ConfigError(f"Invalid value for {ENV_PREFIX}{f.name}: {raw!r}") from e

    return base


# Module level singleton
config = get_config()
