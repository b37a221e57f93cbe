"""
Calendar Projector.

Maps a month (or a trailing window of days) onto heatmap cells.
The cell for today is computed from the live working copy; every other
cell reads the historical insight series.
"""
import datetime
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.aggregator import compute_today_completion_ratio
from core.clock import today_index
from core.models import DailyTask

BUCKET_UPCOMING = "upcoming"
BUCKET_NONE = "none"
BUCKET_LOW = "low"
BUCKET_MEDIUM = "medium"
BUCKET_HIGH = "high"


@dataclass
class DayCell:
    """One grid entry. Blank (alignment) cells have no day_number."""
    day_number: Optional[int] = None
    is_today: bool = False
    completion_percent: Optional[int] = None
    date: Optional[datetime.date] = None

    @property
    def is_blank(self) -> bool:
        return self.day_number is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dayNumber": self.day_number,
            "isToday": self.is_today,
            "completionPercent": self.completion_percent,
            "date": self.date.isoformat() if self.date else None,
            "bucket": intensity_bucket(self.completion_percent) if not self.is_blank else None,
        }


@dataclass
class TrailingDay:
    date: datetime.date
    score: Optional[float] = None

    @property
    def percent(self) -> Optional[int]:
        return to_percent(self.score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "score": self.score,
            "bucket": intensity_bucket(self.percent),
        }



def days_in_month(year: int, month: int) -> int:
    """Day 0 of next month: the day before the 1st of the following month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")
    next_first = datetime.date(year + 1, 1, 1) if month == 12 else datetime.date(year, month + 1, 1)
    return (next_first - timedelta(days=1)).day


def leading_blanks(year: int, month: int) -> int:
    """Blank cells before the 1st in a Monday-first grid."""
    # isoweekday() % 7 gives Sunday = 0
    first_weekday = datetime.date(year, month, 1).isoweekday() % 7
    return (first_weekday + 6) % 7


def to_percent(score: Any) -> Optional[int]:
    """Score -> whole percent clamped to 0..100, half-up. Unusable scores give None."""
    if score is None:
        return None
    try:
        value = float(score)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return max(0, min(100, math.floor(value + 0.5)))



def project_month(
    year: int,
    month: int,
    today: datetime.date,
    insights: Mapping[str, float],
    tasks: Sequence[DailyTask] = (),
) -> List[DayCell]:
    """Blank cells for alignment, then one cell per day of the month."""
    cells = [DayCell() for _ in range(leading_blanks(year, month))]

    for day_number in range(1, days_in_month(year, month) + 1):
        day = datetime.date(year, month, day_number)
        if day == today:
            ratio = compute_today_completion_ratio(tasks, today_index(today))
            cells.append(DayCell(day_number, True, to_percent(100 * ratio), day))
        else:
            cells.append(DayCell(day_number, False, to_percent(insights.get(day.isoformat())), day))

    return cells


def project_trailing_window(
    n: int,
    today: datetime.date,
    insights: Mapping[str, float],
) -> List[TrailingDay]:
    """The last n calendar dates ending today, oldest first."""
    if n < 0:
        raise ValueError(f"window size must be >= 0, got {n}")
    start = today - timedelta(days=n - 1)
    days = []
    for offset in range(n):
        day = start + timedelta(days=offset)
        days.append(TrailingDay(day, insights.get(day.isoformat())))
    return days


def intensity_bucket(percent: Optional[int]) -> str:
    if percent is None:
        return BUCKET_UPCOMING
    if percent <= 0:
        return BUCKET_NONE
    if percent < 34:
        return BUCKET_LOW
    if percent < 67:
        return BUCKET_MEDIUM
    return BUCKET_HIGH


def month_grid_to_dict(cells: List[DayCell]) -> List[Dict[str, Any]]:
    return [cell.to_dict() for cell in cells]
