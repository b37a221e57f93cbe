import asyncio
import json
from datetime import date

import pytest

from core.clock import FixedClock
from core.exceptions import InvalidDayIndexError, UnknownGoalError, UnknownTaskError
from core.local_store import LocalLedgerStore
from core.models import Category, CareerGoal, DailyTask, LedgerSnapshot
from core.repository import InMemoryRepository, JsonFileRepository

SUNDAY = date(2026, 10, 18)
WEDNESDAY = date(2026, 10, 14)


def _store(tmp_path, today=WEDNESDAY, snapshot=None) -> LocalLedgerStore:
    repo = JsonFileRepository(tmp_path / "ledger.json")
    if snapshot is not None:
        repo.save(snapshot)
    return LocalLedgerStore(repo, clock=FixedClock(today))


def test_add_toggle_delete_persist_across_reloads(tmp_path):
    async def scenario():
        store = _store(tmp_path)
        task = await store.add_task("Journal", Category.LIFESTYLE, "Night")
        await store.toggle_daily_completion(task.id, 1)
        return task

    task = asyncio.run(scenario())
    reloaded = _store(tmp_path)
    tasks = asyncio.run(reloaded.fetch_daily_tasks())

    assert [t.id for t in tasks] == [task.id]
    assert tasks[0].time_slot == "Night"
    assert tasks[0].completions == [False, True, False, False, False, False, False]

    asyncio.run(reloaded.delete_task(task.id))
    assert asyncio.run(_store(tmp_path).fetch_daily_tasks()) == []


def test_snapshot_lives_under_fixed_key(tmp_path):
    asyncio.run(_store(tmp_path).add_task("Walk", Category.LIFESTYLE))
    document = json.loads((tmp_path / "ledger.json").read_text(encoding="utf-8"))

    assert list(document) == ["habit-data"]
    assert document["habit-data"]["week"] == "2026-W42"
    assert document["habit-data"]["tasks"][0]["label"] == "Walk"


def test_fetch_returns_copies(tmp_path):
    store = _store(tmp_path, snapshot=LedgerSnapshot(tasks=[DailyTask(id="t1", label="Walk")]))
    tasks = asyncio.run(store.fetch_daily_tasks())
    tasks[0].completions[0] = True

    assert asyncio.run(store.fetch_daily_tasks())[0].completions[0] is False


def test_toggle_records_insight_for_that_weekday(tmp_path):
    snapshot = LedgerSnapshot(
        tasks=[DailyTask(id="t1", label="Walk"), DailyTask(id="t2", label="Read")],
        week="2026-W42",
    )
    store = _store(tmp_path, snapshot=snapshot)

    asyncio.run(store.toggle_daily_completion("t1", 2))  # Wednesday = today
    asyncio.run(store.toggle_daily_completion("t1", 0))  # Monday
    asyncio.run(store.toggle_daily_completion("t2", 5))  # Saturday, still in the future

    insights = asyncio.run(store.fetch_insights())
    assert insights["2026-10-14"] == 50.0
    assert insights["2026-10-12"] == 50.0
    assert "2026-10-17" not in insights


def test_goal_toggle_and_add(tmp_path):
    store = _store(tmp_path, snapshot=LedgerSnapshot(goals=[CareerGoal(id="g1", label="Course")]))
    asyncio.run(store.toggle_career_goal("g1"))
    added = asyncio.run(store.add_goal("Portfolio"))

    goals = asyncio.run(_store(tmp_path).fetch_career_goals())
    assert [(g.id, g.is_completed) for g in goals] == [("g1", True), (added.id, False)]


def test_unknown_ids_and_bad_day_raise(tmp_path):
    store = _store(tmp_path, snapshot=LedgerSnapshot(tasks=[DailyTask(id="t1", label="Walk")]))

    with pytest.raises(UnknownTaskError):
        asyncio.run(store.toggle_daily_completion("nope", 0))
    with pytest.raises(InvalidDayIndexError):
        asyncio.run(store.toggle_daily_completion("t1", 9))
    with pytest.raises(UnknownGoalError):
        asyncio.run(store.toggle_career_goal("nope"))
    with pytest.raises(UnknownTaskError):
        asyncio.run(store.delete_task("nope"))


def test_loading_a_previous_week_resets_completions(tmp_path):
    snapshot = LedgerSnapshot(
        tasks=[DailyTask(id="t1", label="Walk", completions=[True] * 7)],
        insights={"2026-10-11": 100.0},
        week="2026-W42",
    )
    store = _store(tmp_path, today=date(2026, 10, 19), snapshot=snapshot)

    tasks = asyncio.run(store.fetch_daily_tasks())
    assert tasks[0].completions == [False] * 7
    assert asyncio.run(store.fetch_insights()) == {"2026-10-11": 100.0}
    assert store.snapshot().week == "2026-W43"


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text("{not json", encoding="utf-8")

    store = LocalLedgerStore(JsonFileRepository(path), clock=FixedClock(SUNDAY))
    assert asyncio.run(store.fetch_daily_tasks()) == []


def test_legacy_serialized_task_list_is_accepted(tmp_path):
    path = tmp_path / "ledger.json"
    legacy = [{"id": "x1", "label": "Hydrate", "category": "Lifestyle", "completions": [True, False]}]
    path.write_text(json.dumps({"habit-data": json.dumps(legacy)}), encoding="utf-8")

    tasks = JsonFileRepository(path).load().tasks
    assert tasks[0].id == "x1"
    assert tasks[0].completions == [True] + [False] * 6


def test_in_memory_repository_saves_on_mutation():
    repo = InMemoryRepository(LedgerSnapshot(tasks=[DailyTask(id="t1", label="Walk")], week="2026-W42"))
    store = LocalLedgerStore(repo, clock=FixedClock(SUNDAY))
    assert repo.save_count == 0

    asyncio.run(store.toggle_daily_completion("t1", 6))
    assert repo.save_count == 1
    assert repo.load().tasks[0].completions[6] is True


def test_corrupt_file_is_kept_as_backup(tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text("{not json", encoding="utf-8")

    JsonFileRepository(path).load()
    assert (tmp_path / "ledger.corrupt.json").read_text(encoding="utf-8") == "{not json"
