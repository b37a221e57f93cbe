"""
Toggle Reconciler for Habit Ledger.

Optimistic-update protocol between the working copy and the Ledger Store:

1. Local phase: the flip is applied to the session synchronously, so it is
   visible before any I/O happens.
2. Confirmation phase: the same flip is sent to the store as a
   fire-and-forget task on the running event loop.

What happens when a confirmation fails is decided by a ConfirmationPolicy:
- SwallowPolicy: log it, keep the local flip (default)
- RetryPolicy: resend a few times, then behave like SwallowPolicy
- RollbackPolicy: undo the local flip
"""
import asyncio
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Deque, Optional, Set

from core.config_manager import config
from core.exceptions import InvalidDayIndexError, UnknownGoalError, UnknownTaskError
from core.logger import get_logger
from core.models import DAYS_PER_WEEK, Category, DailyTask, normalize_completions
from core.session import LedgerSession
from core.store import LedgerStore

logger = get_logger("reconciler")

OUTCOME_HISTORY = 100


class ConfirmationKind(Enum):
    DAILY_TOGGLE = "daily_toggle"
    GOAL_TOGGLE = "goal_toggle"
    DELETE_TASK = "delete_task"


@dataclass
class PendingConfirmation:
    """A store write that still has to be confirmed."""
    kind: ConfirmationKind
    target_id: str
    send: Callable[[], Awaitable[None]]
    undo: Callable[[], None]
    day_index: Optional[int] = None

    def describe(self) -> str:
        if self.day_index is None:
            return f"{self.kind.value}({self.target_id})"
        return f"{self.kind.value}({self.target_id}, day={self.day_index})"


@dataclass
class ConfirmationOutcome:
    target_id: str
    kind: ConfirmationKind
    action: str           # confirmed | swallowed | rolled_back
    attempts: int = 1
    error: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.action == "confirmed"


class ConfirmationPolicy(ABC):
    """Decides what to do after a confirmation failed once."""

    name = "base"

    @abstractmethod
    async def handle(self, confirmation: PendingConfirmation, error: Exception) -> ConfirmationOutcome:
        pass


class SwallowPolicy(ConfirmationPolicy):
    """
    Keep the local flip and move on.

    Local state may now diverge from the store until the next load.
    """

    name = "swallow"

    async def handle(self, confirmation: PendingConfirmation, error: Exception) -> ConfirmationOutcome:
        logger.warning(f"Confirmation failed for {confirmation.describe()}, keeping local state: {error}")
        return ConfirmationOutcome(
            target_id=confirmation.target_id,
            kind=confirmation.kind,
            action="swallowed",
            error=str(error),
        )


class RetryPolicy(ConfirmationPolicy):
    """Resend up to `attempts` times in total, then swallow."""

    name = "retry"

    def __init__(self, attempts: Optional[int] = None, delay: Optional[float] = None):
        self.attempts = max(1, attempts if attempts is not None else config.RETRY_ATTEMPTS)
        self.delay = delay if delay is not None else config.RETRY_DELAY_SECONDS

    async def handle(self, confirmation: PendingConfirmation, error: Exception) -> ConfirmationOutcome:
        last_error = error
        for attempt in range(2, self.attempts + 1):
            if self.delay:
                await asyncio.sleep(self.delay)
            try:
                await confirmation.send()
            except Exception as e:
                logger.info(f"Retry {attempt}/{self.attempts} failed for {confirmation.describe()}: {e}")
                last_error = e
                continue
            return ConfirmationOutcome(
                target_id=confirmation.target_id,
                kind=confirmation.kind,
                action="confirmed",
                attempts=attempt,
            )

        logger.warning(
            f"Confirmation failed {self.attempts} times for {confirmation.describe()}, "
            f"keeping local state: {last_error}"
        )
        return ConfirmationOutcome(
            target_id=confirmation.target_id,
            kind=confirmation.kind,
            action="swallowed",
            attempts=self.attempts,
            error=str(last_error),
        )


class RollbackPolicy(ConfirmationPolicy):
    """Undo the optimistic change so the UI matches the store again."""

    name = "rollback"

    async def handle(self, confirmation: PendingConfirmation, error: Exception) -> ConfirmationOutcome:
        confirmation.undo()
        logger.warning(f"Confirmation failed for {confirmation.describe()}, rolled back: {error}")
        return ConfirmationOutcome(
            target_id=confirmation.target_id,
            kind=confirmation.kind,
            action="rolled_back",
            error=str(error),
        )


POLICIES = {
    SwallowPolicy.name: SwallowPolicy,
    RetryPolicy.name: RetryPolicy,
    RollbackPolicy.name: RollbackPolicy,
}


def build_policy(name: Optional[str] = None) -> ConfirmationPolicy:
    key = (name or config.CONFIRMATION_POLICY).strip().lower()
    policy_cls = POLICIES.get(key)
    if policy_cls is None:
        logger.warning(f"Unknown confirmation policy '{key}', falling back to swallow")
        policy_cls = SwallowPolicy
    return policy_cls()


class Reconciler:
    """
    Applies user actions to the session immediately and confirms them with
    the store in the background.

    Usage (inside a running event loop):
        reconciler = Reconciler(store, session)
        reconciler.toggle_daily_completion("t1", 2)
        ...
        await reconciler.drain()
    """

    def __init__(
        self,
        store: LedgerStore,
        session: LedgerSession,
        policy: Optional[ConfirmationPolicy] = None,
    ):
        self.store = store
        self.session = session
        self.policy = policy or build_policy()
        self.outcomes: Deque[ConfirmationOutcome] = deque(maxlen=OUTCOME_HISTORY)
        self._pending: Set["asyncio.Task[ConfirmationOutcome]"] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # --- local mutations ---

    def _flip_daily(self, task_id: str, day_index: int) -> None:
        task = self.session.find_task(task_id)
        if task is None:
            # deleted while the confirmation was in flight
            return
        completions = normalize_completions(task.completions)
        completions[day_index] = not completions[day_index]
        task.completions = completions

    def _flip_goal(self, goal_id: str) -> None:
        goal = self.session.find_goal(goal_id)
        if goal is not None:
            goal.is_completed = not goal.is_completed

    # --- confirmation phase ---

    def _confirm(self, confirmation: PendingConfirmation, loop: asyncio.AbstractEventLoop) -> "asyncio.Task[ConfirmationOutcome]":
        task = loop.create_task(self._run(confirmation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, confirmation: PendingConfirmation) -> ConfirmationOutcome:
        try:
            await confirmation.send()
            outcome = ConfirmationOutcome(
                target_id=confirmation.target_id,
                kind=confirmation.kind,
                action="confirmed",
            )
        except Exception as e:
            try:
                outcome = await self.policy.handle(confirmation, e)
            except Exception as policy_error:
                logger.error(
                    f"Confirmation policy '{self.policy.name}' failed for "
                    f"{confirmation.describe()}: {policy_error}",
                    exc_info=True,
                )
                outcome = ConfirmationOutcome(
                    target_id=confirmation.target_id,
                    kind=confirmation.kind,
                    action="swallowed",
                    error=str(e),
                )
        self.outcomes.append(outcome)
        return outcome

    async def drain(self) -> None:
        """Wait until every in-flight confirmation has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # --- public operations ---

    def toggle_daily_completion(self, task_id: str, day_index: int) -> "asyncio.Task[ConfirmationOutcome]":
        """
        Flip one completion bit now and confirm it in the background.

        Raises:
            UnknownTaskError: task_id is not in the working copy
            InvalidDayIndexError: day_index outside 0..6
            RuntimeError: called outside a running event loop
        """
        if self.session.find_task(task_id) is None:
            raise UnknownTaskError(task_id)
        if isinstance(day_index, bool) or not isinstance(day_index, int) or not 0 <= day_index < DAYS_PER_WEEK:
            raise InvalidDayIndexError(day_index)
        loop = asyncio.get_running_loop()

        self._flip_daily(task_id, day_index)
        return self._confirm(
            PendingConfirmation(
                kind=ConfirmationKind.DAILY_TOGGLE,
                target_id=task_id,
                day_index=day_index,
                send=lambda: self.store.toggle_daily_completion(task_id, day_index),
                undo=lambda: self._flip_daily(task_id, day_index),
            ),
            loop,
        )

    def toggle_career_goal(self, goal_id: str) -> "asyncio.Task[ConfirmationOutcome]":
        """Flip a goal's completion now and confirm it in the background."""
        if self.session.find_goal(goal_id) is None:
            raise UnknownGoalError(goal_id)
        loop = asyncio.get_running_loop()

        self._flip_goal(goal_id)
        return self._confirm(
            PendingConfirmation(
                kind=ConfirmationKind.GOAL_TOGGLE,
                target_id=goal_id,
                send=lambda: self.store.toggle_career_goal(goal_id),
                undo=lambda: self._flip_goal(goal_id),
            ),
            loop,
        )

    def delete_task(self, task_id: str) -> "asyncio.Task[ConfirmationOutcome]":
        """Remove the task locally now; the store delete is confirmed in the background."""
        task = self.session.find_task(task_id)
        if task is None:
            raise UnknownTaskError(task_id)
        loop = asyncio.get_running_loop()

        position = self.session.tasks.index(task)
        self.session.tasks.remove(task)

        def undo() -> None:
            if self.session.find_task(task_id) is None:
                self.session.tasks.insert(min(position, len(self.session.tasks)), task)

        return self._confirm(
            PendingConfirmation(
                kind=ConfirmationKind.DELETE_TASK,
                target_id=task_id,
                send=lambda: self.store.delete_task(task_id),
                undo=undo,
            ),
            loop,
        )

    async def add_task(self, label: str, category: Category, time_slot: Optional[str] = None) -> DailyTask:
        """Create the task in the store, then append the store's copy locally."""
        task = await self.store.add_task(label, Category.parse(category), time_slot)
        self.session.tasks.append(task)
        logger.info(f"Added task {task.id} '{task.label}'")
        return task
