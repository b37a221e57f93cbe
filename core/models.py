"""
Core Data Models for Habit Ledger.
Defines daily tasks, career goals, medication slots and the persisted snapshot.
"""
import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

DAYS_PER_WEEK = 7
DAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class Category(str, Enum):
    LIFESTYLE = "Lifestyle"
    CAREER = "Career"

    @classmethod
    def parse(cls, raw: Any) -> "Category":
        """Unknown values fall back to Lifestyle."""
        if isinstance(raw, Category):
            return raw
        for member in cls:
            if str(raw or "").strip().lower() == member.value.lower():
                return member
        return cls.LIFESTYLE


class MedicationType(str, Enum):
    PILL = "Pill"
    SCALP = "Scalp"
    SPOTS = "Spots"


def normalize_completions(raw: Any) -> List[bool]:
    """
    Coerce anything into exactly seven booleans.

    Missing -> all False, short -> padded with False, long -> truncated.
    """
    if not isinstance(raw, (list, tuple)):
        return [False] * DAYS_PER_WEEK
    values = [bool(v) for v in raw[:DAYS_PER_WEEK]]
    values.extend([False] * (DAYS_PER_WEEK - len(values)))
    return values


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class DailyTask:
    """A recurring task with one completion bit per weekday (0 = Monday)."""
    id: str
    label: str
    category: Category = Category.LIFESTYLE
    time_slot: Optional[str] = None  # "Morning", free text
    completions: List[bool] = field(default_factory=lambda: [False] * DAYS_PER_WEEK)

    @classmethod
    def create(cls, label: str, category: Any, time_slot: Optional[str] = None) -> "DailyTask":
        return cls(
            id=new_id(),
            label=label,
            category=Category.parse(category),
            time_slot=time_slot,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyTask":
        """Parse the wire form; tolerant of missing or malformed fields."""
        return cls(
            id=str(data.get("id") or new_id()),
            label=str(data.get("label") or ""),
            category=Category.parse(data.get("category")),
            time_slot=data.get("timeSlot", data.get("time_slot")),
            completions=normalize_completions(data.get("completions")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "timeSlot": self.time_slot,
            "category": self.category.value,
            "completions": list(self.completions),
        }


@dataclass
class CareerGoal:
    """A career/learning goal; completion is binary."""
    id: str
    label: str
    is_completed: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CareerGoal":
        return cls(
            id=str(data.get("id") or new_id()),
            label=str(data.get("label") or ""),
            is_completed=bool(data.get("isCompleted", data.get("is_completed", False))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "isCompleted": self.is_completed}


@dataclass
class MedicationItem:
    name: str
    type: MedicationType = MedicationType.PILL

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type.value}


@dataclass
class MedicationSlot:
    """One fixed time of day in the medication schedule."""
    id: str
    time: str                      # display string, e.g. "08:00 AM"
    note: str
    items: List[MedicationItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "time": self.time,
            "note": self.note,
            "items": [item.to_dict() for item in self.items],
        }


def parse_insights(raw: Any) -> Dict[str, float]:
    """ISO date -> score. Non-numeric and non-finite scores are dropped."""
    if not isinstance(raw, dict):
        return {}
    insights: Dict[str, float] = {}
    for key, value in raw.items():
        if isinstance(value, bool):
            continue
        try:
            score = float(value)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(score):
            continue
        insights[str(key)] = score
    return insights


@dataclass
class LedgerSnapshot:
    """Everything the Ledger Store persists."""
    tasks: List[DailyTask] = field(default_factory=list)
    goals: List[CareerGoal] = field(default_factory=list)
    insights: Dict[str, float] = field(default_factory=dict)
    week: str = ""  # ISO week the completions belong to, e.g. "2026-W42"

    @classmethod
    def from_dict(cls, data: Any) -> "LedgerSnapshot":
        # The local variant originally stored a bare task list
        if isinstance(data, list):
            data = {"tasks": data}
        if not isinstance(data, dict):
            return cls()
        return cls(
            tasks=[DailyTask.from_dict(t) for t in data.get("tasks") or [] if isinstance(t, dict)],
            goals=[CareerGoal.from_dict(g) for g in data.get("goals") or [] if isinstance(g, dict)],
            insights=parse_insights(data.get("insights")),
            week=str(data.get("week") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "goals": [g.to_dict() for g in self.goals],
            "insights": dict(self.insights),
            "week": self.week,
        }
