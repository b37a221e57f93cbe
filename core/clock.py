"""
Current-date provider.

Anything that needs "today" takes a Clock so tests can pin the date.
"""
from datetime import date
from typing import Protocol


class Clock(Protocol):
    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock, local time."""

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Always returns the same day. Used by tests and the CLI --today flag."""

    def __init__(self, day: date):
        self.day = day

    def today(self) -> date:
        return self.day


def today_index(day: date) -> int:
    """Column of `day` in the week matrix (Monday = 0)."""
    return day.weekday()


def is_sunday(day: date) -> bool:
    return day.weekday() == 6
