"""
LedgerSession: the client's in-memory working copy.

Fetched from the Ledger Store once at startup, then mutated optimistically
by the Reconciler. The store stays authoritative; the session is what the
presentation layer reads.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.aggregator import compute_momentum_score, compute_today_completion_ratio, weekly_summary
from core.clock import Clock, today_index
from core.logger import get_logger
from core.models import CareerGoal, DailyTask
from core.store import LedgerStore

logger = get_logger("session")


@dataclass
class LedgerSession:
    tasks: List[DailyTask] = field(default_factory=list)
    goals: List[CareerGoal] = field(default_factory=list)
    insights: Dict[str, float] = field(default_factory=dict)
    load_error: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return self.load_error is None

    @property
    def momentum_score(self) -> int:
        return compute_momentum_score(self.tasks)

    def today_ratio(self, clock: Clock) -> float:
        return compute_today_completion_ratio(self.tasks, today_index(clock.today()))

    def summary(self, clock: Clock) -> Dict:
        return weekly_summary(self.tasks, self.goals, today_index(clock.today()))

    def find_task(self, task_id: str) -> Optional[DailyTask]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def find_goal(self, goal_id: str) -> Optional[CareerGoal]:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        return None


async def load_session(store: LedgerStore, include_insights: bool = True) -> LedgerSession:
    """
    Fetch tasks, goals and (optionally) insights concurrently.

    All-or-nothing: if any fetch fails the session comes back empty with
    load_error set. Never raises.
    """
    fetches = [store.fetch_daily_tasks(), store.fetch_career_goals()]
    if include_insights:
        fetches.append(store.fetch_insights())

    try:
        results = await asyncio.gather(*fetches)
    except Exception as e:
        logger.error(f"Initial load failed: {e}", exc_info=True)
        return LedgerSession(load_error=str(e) or e.__class__.__name__)

    tasks, goals = results[0], results[1]
    insights = results[2] if include_insights else {}
    logger.info(f"Loaded {len(tasks)} tasks, {len(goals)} goals, {len(insights)} insight days")
    return LedgerSession(tasks=list(tasks), goals=list(goals), insights=dict(insights))
