"""
Ledger Store interface.

The authoritative copy of tasks, goals and insights lives behind this
interface: either a remote server (interface.ledger_client) or a local
JSON document (core.local_store).
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from core.models import Category, CareerGoal, DailyTask


class LedgerStore(ABC):
    """Async CRUD surface consumed by the session and the reconciler."""

    @abstractmethod
    async def fetch_daily_tasks(self) -> List[DailyTask]:
        pass

    @abstractmethod
    async def fetch_career_goals(self) -> List[CareerGoal]:
        pass

    @abstractmethod
    async def fetch_insights(self) -> Dict[str, float]:
        pass

    @abstractmethod
    async def toggle_daily_completion(self, task_id: str, day_index: int) -> None:
        """Flip one completion bit. Encodes "flip", not "set"."""
        pass

    @abstractmethod
    async def toggle_career_goal(self, goal_id: str) -> None:
        pass

    @abstractmethod
    async def add_task(
        self,
        label: str,
        category: Category,
        time_slot: Optional[str] = None,
    ) -> DailyTask:
        """Create a task with seven False completions."""
        pass

    @abstractmethod
    async def delete_task(self, task_id: str) -> None:
        pass

    async def close(self) -> None:
        """Release transport resources, if any."""
        return None
