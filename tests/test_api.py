from datetime import date

from fastapi.testclient import TestClient

from core.clock import FixedClock
from core.local_store import LocalLedgerStore
from core.models import CareerGoal, DailyTask, LedgerSnapshot
from core.repository import InMemoryRepository
from web.backend.app import create_app

SUNDAY = date(2026, 10, 18)


def _client(snapshot=None) -> TestClient:
    clock = FixedClock(SUNDAY)
    repo = InMemoryRepository(snapshot or LedgerSnapshot(
        tasks=[
            DailyTask(id="t1", label="Meditate", time_slot="Morning"),
            DailyTask(id="t2", label="Read"),
        ],
        goals=[CareerGoal(id="g1", label="Course")],
        insights={"2026-10-17": 50.0},
        week="2026-W42",
    ))
    return TestClient(create_app(store=LocalLedgerStore(repo, clock=clock), clock=clock))


def test_health():
    assert _client().get("/health").json()["status"] == "ok"


def test_daily_crud_and_toggle():
    client = _client()

    created = client.post("/api/daily", json={"label": "Stretch", "category": "Career", "timeSlot": "Noon"})
    assert created.status_code == 200
    new_id = created.json()["id"]
    assert created.json()["completions"] == [False] * 7

    assert client.post("/api/daily/toggle", json={"taskId": "t1", "dayIndex": 6}).status_code == 200
    daily = client.get("/api/daily").json()
    assert [t["id"] for t in daily] == ["t1", "t2", new_id]
    assert daily[0]["completions"][6] is True
    assert daily[0]["timeSlot"] == "Morning"

    assert client.delete(f"/api/daily/{new_id}").status_code == 200
    assert len(client.get("/api/daily").json()) == 2


def test_toggle_validation():
    client = _client()
    assert client.post("/api/daily/toggle", json={"taskId": "t1", "dayIndex": 7}).status_code == 422
    assert client.post("/api/daily/toggle", json={"taskId": "zzz", "dayIndex": 0}).status_code == 404
    assert client.post("/api/career/toggle", json={"goalId": "zzz"}).status_code == 404
    assert client.delete("/api/daily/zzz").status_code == 404
    assert client.post("/api/daily", json={"label": "x", "category": "Hobby"}).status_code == 422


def test_career_toggle_and_insights():
    client = _client()
    client.post("/api/career/toggle", json={"goalId": "g1"})
    assert client.get("/api/career").json() == [{"id": "g1", "label": "Course", "isCompleted": True}]

    client.post("/api/daily/toggle", json={"taskId": "t2", "dayIndex": 6})
    insights = client.get("/api/insights").json()
    assert insights["2026-10-17"] == 50.0
    assert insights["2026-10-18"] == 50.0


def test_momentum_and_calendar_views():
    client = _client()
    client.post("/api/daily/toggle", json={"taskId": "t1", "dayIndex": 6})

    momentum = client.get("/api/momentum").json()
    assert momentum["momentum"] == 7
    assert momentum["today_index"] == 6
    assert momentum["date"] == "2026-10-18"

    calendar = client.get("/api/calendar").json()
    assert (calendar["year"], calendar["month"]) == (2026, 10)
    cells = calendar["cells"]
    assert len(cells) == 3 + 31
    today = [c for c in cells if c["isToday"]]
    assert today == [{"dayNumber": 18, "isToday": True, "completionPercent": 50, "date": "2026-10-18", "bucket": "medium"}]
    assert cells[3 + 16]["completionPercent"] == 50
    assert cells[3 + 20]["bucket"] == "upcoming"

    feb = client.get("/api/calendar", params={"year": 2024, "month": 2}).json()
    assert len(feb["cells"]) == 3 + 29
    assert client.get("/api/calendar", params={"month": 13}).status_code == 422


def test_heatmap_and_medications():
    client = _client()
    days = client.get("/api/heatmap").json()["days"]
    assert len(days) == 28
    assert days[-1]["date"] == "2026-10-18"
    assert days[-2] == {"date": "2026-10-17", "score": 50.0, "bucket": "medium"}
    assert len(client.get("/api/heatmap", params={"days": 7}).json()["days"]) == 7

    meds = client.get("/api/medications").json()
    assert meds[2]["note"] == "Sunday Stack"
    assert meds[2]["items"][-1] == {"name": "Uprise D3", "type": "Pill"}


def test_calendar_tolerates_non_finite_insights():
    client = _client(LedgerSnapshot(
        tasks=[DailyTask(id="t1", label="Meditate")],
        insights={"2026-10-01": float("nan"), "2026-10-02": float("inf"), "2026-10-03": 70.0},
        week="2026-W42",
    ))
    response = client.get("/api/calendar")
    assert response.status_code == 200
    cells = response.json()["cells"]
    # October 2026 starts on a Thursday: three blanks
    assert [c["completionPercent"] for c in cells[3:6]] == [None, None, 70]
    assert client.get("/api/heatmap").status_code == 200
