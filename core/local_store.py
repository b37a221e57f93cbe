"""
LocalLedgerStore: the ledger kept in a local repository.

Used on its own by the local-only variant (no server round-trip) and as the
backing store of the web server. Every mutation is saved immediately.
"""
from datetime import timedelta
from typing import Dict, List, Optional

from core.aggregator import round_half_up
from core.clock import Clock, SystemClock, today_index
from core.exceptions import InvalidDayIndexError, UnknownGoalError, UnknownTaskError
from core.logger import get_logger
from core.models import DAYS_PER_WEEK, Category, CareerGoal, DailyTask, LedgerSnapshot, new_id
from core.repository import LedgerRepository
from core.store import LedgerStore
from scheduler.week_rollover import apply_rollover

logger = get_logger("local_store")


class LocalLedgerStore(LedgerStore):

    def __init__(
        self,
        repository: LedgerRepository,
        clock: Optional[Clock] = None,
        rollover_policy: Optional[str] = None,
    ):
        self._repository = repository
        self._clock = clock or SystemClock()
        self._rollover_policy = rollover_policy
        self._snapshot = repository.load()
        self._sync_week()

    def _sync_week(self) -> None:
        previous = self._snapshot.week
        apply_rollover(self._snapshot, self._clock.today(), self._rollover_policy)
        if self._snapshot.week != previous:
            self._repository.save(self._snapshot)

    def _current(self) -> LedgerSnapshot:
        # a long-running server crosses week boundaries too
        self._sync_week()
        return self._snapshot

    def _find_task(self, task_id: str) -> DailyTask:
        for task in self._current().tasks:
            if task.id == task_id:
                return task
        raise UnknownTaskError(task_id)

    def _find_goal(self, goal_id: str) -> CareerGoal:
        for goal in self._current().goals:
            if goal.id == goal_id:
                return goal
        raise UnknownGoalError(goal_id)

    def _record_insights(self, columns: List[int]) -> None:
        """Store the completion percent of the given weekday columns, past and today only."""
        today = self._clock.today()
        week_start = today - timedelta(days=today_index(today))
        tasks = self._snapshot.tasks
        for column in columns:
            day = week_start + timedelta(days=column)
            if day > today:
                continue
            done = sum(1 for t in tasks if t.completions[column])
            percent = round_half_up(100 * done, len(tasks)) if tasks else 0
            self._snapshot.insights[day.isoformat()] = float(percent)

    # --- reads ---

    def snapshot(self) -> LedgerSnapshot:
        return self._current()

    async def fetch_daily_tasks(self) -> List[DailyTask]:
        return [DailyTask.from_dict(t.to_dict()) for t in self._current().tasks]

    async def fetch_career_goals(self) -> List[CareerGoal]:
        return [CareerGoal.from_dict(g.to_dict()) for g in self._current().goals]

    async def fetch_insights(self) -> Dict[str, float]:
        return dict(self._current().insights)

    # --- writes ---

    async def toggle_daily_completion(self, task_id: str, day_index: int) -> None:
        if not 0 <= day_index < DAYS_PER_WEEK:
            raise InvalidDayIndexError(day_index)
        task = self._find_task(task_id)
        task.completions[day_index] = not task.completions[day_index]
        self._record_insights([day_index])
        self._repository.save(self._snapshot)
        logger.info(f"Toggled task {task_id} day {day_index} -> {task.completions[day_index]}")

    async def toggle_career_goal(self, goal_id: str) -> None:
        goal = self._find_goal(goal_id)
        goal.is_completed = not goal.is_completed
        self._repository.save(self._snapshot)
        logger.info(f"Toggled goal {goal_id} -> {goal.is_completed}")

    async def add_task(
        self,
        label: str,
        category: Category,
        time_slot: Optional[str] = None,
    ) -> DailyTask:
        task = DailyTask.create(label, category, time_slot)
        self._current().tasks.append(task)
        self._record_insights(list(range(DAYS_PER_WEEK)))
        self._repository.save(self._snapshot)
        logger.info(f"Added task {task.id} '{label}'")
        return DailyTask.from_dict(task.to_dict())

    async def add_goal(self, label: str) -> CareerGoal:
        goal = CareerGoal(id=new_id(), label=label)
        self._current().goals.append(goal)
        self._repository.save(self._snapshot)
        logger.info(f"Added goal {goal.id} '{label}'")
        return CareerGoal.from_dict(goal.to_dict())

    async def delete_task(self, task_id: str) -> None:
        task = self._find_task(task_id)
        self._snapshot.tasks.remove(task)
        self._record_insights(list(range(DAYS_PER_WEEK)))
        self._repository.save(self._snapshot)
        logger.info(f"Deleted task {task_id}")
