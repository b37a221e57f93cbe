"""
Habit Ledger logging.

Every module logs under the ``habit_ledger`` namespace. setup_logging()
attaches three sinks to that namespace:

    <logs>/system.log   routine operations, LOG_LEVEL and up
    <logs>/error.log    failures with tracebacks, ERROR and up
    stderr              what the person at the terminal should see

Both files rotate at MAX_BYTES and keep BACKUP_COUNT old copies.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from core.paths import LOGS_DIR

ROOT_LOGGER_NAME = "habit_ledger"

MAX_BYTES = 5 * 1024 * 1024  # 5MB
BACKUP_COUNT = 3

FILE_FORMAT = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
CONSOLE_FORMAT = logging.Formatter("[%(levelname)s] %(message)s")

Level = Union[int, str]


def resolve_level(level: Level) -> int:
    """Accept 20 as well as "info" / "INFO"."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _rotating_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(FILE_FORMAT)
    return handler


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(
    log_level: Level = logging.INFO,
    console_level: Level = logging.WARNING,
    logs_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Attach the file and console sinks to the ledger namespace.

    Safe to call again: previous handlers are closed and replaced.

    Args:
        log_level: threshold for system.log (int or level name)
        console_level: threshold for stderr (int or level name)
        logs_dir: defaults to core.paths.LOGS_DIR

    Returns:
        The ``habit_ledger`` logger
    """
    file_level = resolve_level(log_level)
    stream_level = resolve_level(console_level)

    target_dir = Path(logs_dir) if logs_dir else LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.DEBUG)
    _reset_handlers(root)

    root.addHandler(_rotating_handler(target_dir / "system.log", file_level))
    root.addHandler(_rotating_handler(target_dir / "error.log", logging.ERROR))

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(stream_level)
    console.setFormatter(CONSOLE_FORMAT)
    root.addHandler(console)

    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """``get_logger("reconciler")`` -> ``habit_ledger.reconciler``."""
    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return logging.getLogger(ROOT_LOGGER_NAME)
