import asyncio
import json

import httpx
import pytest

from core.exceptions import MalformedDataError, StoreConnectionError, StoreError, StoreTimeoutError
from core.models import Category
from interface.ledger_client import HttpLedgerStore

BASE = "http://ledger.test/api"


def _store(handler) -> HttpLedgerStore:
    return HttpLedgerStore(BASE, timeout=1.0, transport=httpx.MockTransport(handler))


def _call(store: HttpLedgerStore, coro_factory):
    async def scenario():
        async with store:
            return await coro_factory(store)
    return asyncio.run(scenario())


def test_fetches_parse_wire_format():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/daily":
            return httpx.Response(200, json=[
                {"id": "t1", "label": "Run", "timeSlot": "Morning", "category": "Lifestyle",
                 "completions": [True, False, False, False, False, False, False]},
                {"id": "t2", "label": "Broken"},
            ])
        if request.url.path == "/api/career":
            return httpx.Response(200, json=[{"id": "g1", "label": "Course", "isCompleted": True}])
        if request.url.path == "/api/insights":
            return httpx.Response(200, json={"2026-10-01": 40})
        return httpx.Response(404)

    store = _store(handler)

    async def fetch_all(s):
        return await s.fetch_daily_tasks(), await s.fetch_career_goals(), await s.fetch_insights()

    tasks, goals, insights = _call(store, fetch_all)
    assert tasks[0].time_slot == "Morning"
    assert tasks[1].completions == [False] * 7
    assert goals[0].is_completed is True
    assert insights == {"2026-10-01": 40.0}


def test_toggle_payloads():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, json.loads(request.content or b"null")))
        return httpx.Response(200, json={"success": True})

    store = _store(handler)

    async def toggles(s):
        await s.toggle_daily_completion("t1", 3)
        await s.toggle_career_goal("g1")
        await s.delete_task("t1")

    _call(store, toggles)
    assert seen == [
        ("POST", "/api/daily/toggle", {"taskId": "t1", "dayIndex": 3}),
        ("POST", "/api/career/toggle", {"goalId": "g1"}),
        ("DELETE", "/api/daily/t1", None),
    ]


def test_add_task_returns_created_task():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return httpx.Response(200, json={"id": "new", **body, "completions": [False] * 7})

    task = _call(_store(handler), lambda s: s.add_task("Stretch", Category.CAREER, "Noon"))
    assert task.id == "new"
    assert task.category == Category.CAREER
    assert task.time_slot == "Noon"


def test_http_error_maps_to_store_error():
    store = _store(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(StoreError) as excinfo:
        _call(store, lambda s: s.toggle_career_goal("g1"))
    assert excinfo.value.status_code == 500
    assert excinfo.value.operation == "toggle_career_goal"


def test_transport_errors_are_mapped():
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    def slow(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(StoreConnectionError):
        _call(_store(refuse), lambda s: s.fetch_daily_tasks())
    with pytest.raises(StoreTimeoutError):
        _call(_store(slow), lambda s: s.fetch_daily_tasks())


def test_malformed_bodies_raise():
    with pytest.raises(MalformedDataError):
        _call(_store(lambda r: httpx.Response(200, json={"not": "a list"})), lambda s: s.fetch_daily_tasks())
    with pytest.raises(MalformedDataError):
        _call(_store(lambda r: httpx.Response(200, text="<html>")), lambda s: s.fetch_career_goals())
    with pytest.raises(MalformedDataError):
        _call(_store(lambda r: httpx.Response(200, json=[1, 2])), lambda s: s.fetch_insights())


def test_non_finite_insights_are_dropped():
    body = b'{"2026-10-01": NaN, "2026-10-02": Infinity, "2026-10-03": 40}'
    store = _store(lambda r: httpx.Response(200, content=body, headers={"Content-Type": "application/json"}))
    assert _call(store, lambda s: s.fetch_insights()) == {"2026-10-03": 40.0}
