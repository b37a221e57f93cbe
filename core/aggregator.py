"""
Habit Aggregator.

Pure functions deriving scores and views from ledger snapshots.
"""
from typing import Any, Dict, List, Sequence

from core.models import DAYS_PER_WEEK, CareerGoal, DailyTask


def _slots(task: DailyTask) -> List[bool]:
    # Out-of-contract arrays: extra entries ignored, missing ones count as False
    raw = getattr(task, "completions", None) or []
    values = [bool(v) for v in list(raw)[:DAYS_PER_WEEK]]
    return values + [False] * (DAYS_PER_WEEK - len(values))


def round_half_up(numerator: int, denominator: int) -> int:
    """round(numerator / denominator) with .5 going up, in integer arithmetic."""
    return (2 * numerator + denominator) // (2 * denominator)


def compute_momentum_score(tasks: Sequence[DailyTask]) -> int:
    """
    Percentage of all (task x weekday) slots completed this week.

    Returns 0 for an empty task list.
    """
    if not tasks:
        return 0
    total = len(tasks) * DAYS_PER_WEEK
    done = sum(sum(_slots(t)) for t in tasks)
    return round_half_up(100 * done, total)


def compute_today_completion_ratio(tasks: Sequence[DailyTask], today_index: int) -> float:
    """Share of tasks completed in column `today_index`; 0.0 when empty."""
    if not tasks or not 0 <= today_index < DAYS_PER_WEEK:
        return 0.0
    done = sum(1 for t in tasks if _slots(t)[today_index])
    return done / len(tasks)


def day_completion_ratios(tasks: Sequence[DailyTask]) -> List[float]:
    """Completion ratio for each weekday column."""
    return [compute_today_completion_ratio(tasks, i) for i in range(DAYS_PER_WEEK)]


def career_progress(goals: Sequence[CareerGoal]) -> Dict[str, int]:
    total = len(goals)
    completed = sum(1 for g in goals if g.is_completed)
    return {
        "completed": completed,
        "total": total,
        "percent": round_half_up(100 * completed, total) if total else 0,
    }


def weekly_summary(
    tasks: Sequence[DailyTask],
    goals: Sequence[CareerGoal],
    today_index: int,
) -> Dict[str, Any]:
    """Bundle of derived values for the API and CLI."""
    return {
        "momentum": compute_momentum_score(tasks),
        "today_index": today_index,
        "today_ratio": compute_today_completion_ratio(tasks, today_index),
        "day_ratios": day_completion_ratios(tasks),
        "career": career_progress(goals),
    }
