"""
Week Rollover for Habit Ledger.

The seven completion slots of every task mean "this ISO week".
When the stored snapshot belongs to an earlier week, completions are cleared.

Policies (config.WEEK_ROLLOVER_POLICY):
- iso_week_reset: clear completions when the ISO week changes
- never: keep completions until the user clears them
"""
from datetime import date
from enum import Enum
from typing import Optional

from core.config_manager import config
from core.logger import get_logger
from core.models import DAYS_PER_WEEK, LedgerSnapshot

logger = get_logger("week_rollover")


class RolloverPolicy(Enum):
    ISO_WEEK_RESET = "iso_week_reset"
    NEVER = "never"


def week_key(day: date) -> str:
    """ISO week key, e.g. 2026-W42."""
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def needs_rollover(stored_week: str, today: date) -> bool:
    """
    Trigger: stored week differs from the current ISO week.
    An unstamped snapshot is adopted by the current week, not reset.
    """
    if not stored_week:
        return False
    return stored_week != week_key(today)


def apply_rollover(
    snapshot: LedgerSnapshot,
    today: date,
    policy: Optional[str] = None,
) -> bool:
    """
    Bring the snapshot into the current week in place.

    Returns:
        True if completions were cleared.
    """
    try:
        mode = RolloverPolicy(policy or config.WEEK_ROLLOVER_POLICY)
    except ValueError:
        logger.warning(f"Unknown rollover policy '{policy}', using iso_week_reset")
        mode = RolloverPolicy.ISO_WEEK_RESET

    current = week_key(today)
    reset = mode == RolloverPolicy.ISO_WEEK_RESET and needs_rollover(snapshot.week, today)

    if reset:
        for task in snapshot.tasks:
            task.completions = [False] * DAYS_PER_WEEK
        logger.info(f"Week rollover {snapshot.week} -> {current}: cleared {len(snapshot.tasks)} tasks")

    snapshot.week = current
    return reset
