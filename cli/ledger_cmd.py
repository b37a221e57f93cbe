"""
CLI: ledger
Terminal view of the habit matrix, goals and heatmap.
"""
import asyncio
import sys
from datetime import date
from pathlib import Path
from typing import Awaitable, Callable, Optional

import click

# Add project root to sys.path so core modules import when run as a script
project_root = Path(__file__).parent.parent
sys.path.append(str(project_root))

from core.calendar_projector import intensity_bucket, project_month, project_trailing_window, to_percent
from core.clock import Clock, FixedClock, SystemClock, is_sunday, today_index
from core.config_manager import config
from core.exceptions import LedgerError
from core.local_store import LocalLedgerStore
from core.medication import medication_schedule
from core.models import DAY_LABELS, Category
from core.reconciler import Reconciler
from core.repository import JsonFileRepository
from core.session import LedgerSession, load_session
from core.store import LedgerStore
from interface.ledger_client import HttpLedgerStore

BUCKET_GLYPHS = {
    "upcoming": " .",
    "none": " ○",
    "low": " ░",
    "medium": " ▒",
    "high": " █",
}


class LedgerContext:
    def __init__(self, api_url: Optional[str], local_path: Optional[str], clock: Clock):
        self.api_url = api_url
        self.local_path = local_path
        self.clock = clock

    def open_store(self) -> LedgerStore:
        if self.local_path:
            return LocalLedgerStore(JsonFileRepository(Path(self.local_path)), clock=self.clock)
        return HttpLedgerStore(self.api_url)


def _run(ctx: LedgerContext, action: Callable[[LedgerSession, Reconciler], Awaitable[None]]) -> None:
    async def runner() -> bool:
        store = ctx.open_store()
        try:
            session = await load_session(store)
            if not session.loaded:
                click.echo(f"❌ Could not load the ledger: {session.load_error}", err=True)
                return False
            reconciler = Reconciler(store, session)
            await action(session, reconciler)
            await reconciler.drain()
            for outcome in reconciler.outcomes:
                if not outcome.confirmed:
                    click.echo(f"⚠️ Not saved ({outcome.action}): {outcome.error}", err=True)
            return True
        finally:
            await store.close()

    try:
        loaded = asyncio.run(runner())
    except LedgerError as e:
        click.echo(f"❌ {e.get_user_message()}", err=True)
        sys.exit(1)
    if not loaded:
        sys.exit(1)



def _print_matrix(session: LedgerSession, clock: Clock) -> None:
    today_col = today_index(clock.today())
    header = "".join(f" {'[' + d + ']' if i == today_col else ' ' + d + ' '}" for i, d in enumerate(DAY_LABELS))
    click.echo(f"{'':36}{header}")
    for task in session.tasks:
        name = f"{task.label} ({task.time_slot})" if task.time_slot else task.label
        cells = "".join(f"   {'✓' if done else '·'}  " for done in task.completions)
        click.echo(f"{name[:28]:28} {task.id[:6]:6}  {cells}")


@click.group()
@click.option("--api", "api_url", default=None, help="Ledger API base URL")
@click.option("--local", "local_path", default=None, type=click.Path(dir_okay=False), help="Use a local ledger file instead of the API")
@click.option("--today", "today_raw", default=None, help="Pretend today is YYYY-MM-DD")
@click.pass_context
def ledger(ctx, api_url, local_path, today_raw):
    """Habit Ledger commands"""
    clock: Clock = SystemClock()
    if today_raw:
        try:
            clock = FixedClock(date.fromisoformat(today_raw))
        except ValueError:
            raise click.BadParameter("expected YYYY-MM-DD", param_hint="--today")
    ctx.obj = LedgerContext(api_url or config.API_URL, local_path, clock)


@ledger.command()
@click.pass_obj
def status(ctx: LedgerContext):
    """Show the weekly matrix, goals and momentum"""
    async def action(session: LedgerSession, reconciler: Reconciler) -> None:
        summary = session.summary(ctx.clock)
        click.echo(f"🔥 {summary['momentum']}% WEEKLY  |  today {to_percent(summary['today_ratio'] * 100)}%")
        click.echo("")
        _print_matrix(session, ctx.clock)

        career = summary["career"]
        click.echo(f"\n🎯 Career goals ({career['completed']}/{career['total']}):")
        for goal in session.goals:
            click.echo(f"  [{'x' if goal.is_completed else ' '}] {goal.label}  ({goal.id[:6]})")

        click.echo("\n💊 Medications:")
        for slot in medication_schedule(is_sunday(ctx.clock.today())):
            items = ", ".join(item.name for item in slot.items)
            click.echo(f"  {slot.time:9} {slot.note:14} {items}")

    _run(ctx, action)


def _resolve_task_id(session: LedgerSession, prefix: str) -> str:
    matches = [t.id for t in session.tasks if t.id.startswith(prefix)]
    if len(matches) != 1:
        raise click.BadParameter(f"'{prefix}' matches {len(matches)} tasks", param_hint="TASK_ID")
    return matches[0]


def _resolve_goal_id(session: LedgerSession, prefix: str) -> str:
    matches = [g.id for g in session.goals if g.id.startswith(prefix)]
    if len(matches) != 1:
        raise click.BadParameter(f"'{prefix}' matches {len(matches)} goals", param_hint="GOAL_ID")
    return matches[0]


@ledger.command()
@click.argument("task_id")
@click.argument("day", required=False)
@click.pass_obj
def toggle(ctx: LedgerContext, task_id: str, day: Optional[str]):
    """Flip a task for DAY (Mon..Sun or 0..6, default today)"""
    if day is None:
        day_index = today_index(ctx.clock.today())
    elif day.isdigit():
        day_index = int(day)
    else:
        labels = [d.lower() for d in DAY_LABELS]
        if day[:3].lower() not in labels:
            raise click.BadParameter("use Mon..Sun or 0..6", param_hint="DAY")
        day_index = labels.index(day[:3].lower())

    async def action(session: LedgerSession, reconciler: Reconciler) -> None:
        resolved = _resolve_task_id(session, task_id)
        reconciler.toggle_daily_completion(resolved, day_index)
        task = session.find_task(resolved)
        state = "✓" if task.completions[day_index] else "·"
        click.echo(f"{task.label} {DAY_LABELS[day_index]} -> {state}  (momentum {session.momentum_score}%)")

    _run(ctx, action)


@ledger.command()
@click.argument("goal_id")
@click.pass_obj
def goal(ctx: LedgerContext, goal_id: str):
    """Flip a career goal"""
    async def action(session: LedgerSession, reconciler: Reconciler) -> None:
        resolved = _resolve_goal_id(session, goal_id)
        reconciler.toggle_career_goal(resolved)
        g = session.find_goal(resolved)
        click.echo(f"[{'x' if g.is_completed else ' '}] {g.label}")

    _run(ctx, action)


@ledger.command()
@click.argument("label")
@click.option("--category", type=click.Choice([c.value for c in Category]), default=Category.LIFESTYLE.value)
@click.option("--slot", "time_slot", default=None, help="Schedule hint, e.g. Morning")
@click.pass_obj
def add(ctx: LedgerContext, label: str, category: str, time_slot: Optional[str]):
    """Add a daily task"""
    async def action(session: LedgerSession, reconciler: Reconciler) -> None:
        task = await reconciler.add_task(label, Category(category), time_slot)
        click.echo(f"✅ Added {task.label} ({task.id[:6]})")

    _run(ctx, action)


@ledger.command()
@click.argument("task_id")
@click.pass_obj
def remove(ctx: LedgerContext, task_id: str):
    """Delete a daily task"""
    async def action(session: LedgerSession, reconciler: Reconciler) -> None:
        resolved = _resolve_task_id(session, task_id)
        label = session.find_task(resolved).label
        reconciler.delete_task(resolved)
        click.echo(f"🗑️ Removed {label}")

    _run(ctx, action)


@ledger.command()
@click.option("--year", type=int, default=None)
@click.option("--month", type=click.IntRange(1, 12), default=None)
@click.pass_obj
def calendar(ctx: LedgerContext, year: Optional[int], month: Optional[int]):
    """Month heatmap"""
    today = ctx.clock.today()
    year = year or today.year
    month = month or today.month

    async def action(session: LedgerSession, reconciler: Reconciler) -> None:
        cells = project_month(year, month, today, session.insights, session.tasks)
        click.echo(f"{year}-{month:02d}")
        click.echo(" ".join(f"{d:>4}" for d in DAY_LABELS))
        row = []
        for cell in cells:
            if cell.is_blank:
                row.append("    ")
            else:
                marker = "*" if cell.is_today else " "
                row.append(f"{cell.day_number:>2}{marker}{BUCKET_GLYPHS[intensity_bucket(cell.completion_percent)][1]}")
            if len(row) == 7:
                click.echo(" ".join(row))
                row = []
        if row:
            click.echo(" ".join(row))

    _run(ctx, action)


@ledger.command()
@click.option("--days", type=click.IntRange(1, 366), default=None)
@click.pass_obj
def heatmap(ctx: LedgerContext, days: Optional[int]):
    """Trailing window heatmap (oldest first)"""
    async def action(session: LedgerSession, reconciler: Reconciler) -> None:
        window = project_trailing_window(days or config.HEATMAP_WINDOW_DAYS, ctx.clock.today(), session.insights)
        line = "".join(
            BUCKET_GLYPHS[intensity_bucket(d.percent)] for d in window
        )
        click.echo(f"{window[0].date.isoformat()} {line} {window[-1].date.isoformat()}")

    _run(ctx, action)


if __name__ == "__main__":
    ledger()
