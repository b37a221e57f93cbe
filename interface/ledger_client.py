"""
HTTP Ledger Store client.

Talks to the ledger CRUD API (/daily, /career, /insights and the toggle
endpoints) with httpx. Transport problems are mapped onto the StoreError
family so callers only deal with ledger exceptions.
"""
from typing import Any, Dict, List, Optional

import httpx

from core.config_manager import config
from core.exceptions import MalformedDataError, StoreConnectionError, StoreError, StoreTimeoutError
from core.logger import get_logger
from core.models import Category, CareerGoal, DailyTask, parse_insights
from core.store import LedgerStore

logger = get_logger("ledger_client")


class HttpLedgerStore(LedgerStore):
    """Ledger Store reached over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "HttpLedgerStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, operation: str, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.request(method, path, json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise StoreTimeoutError(operation, self.timeout) from e
        except httpx.ConnectError as e:
            raise StoreConnectionError(operation, self.base_url) from e
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"HTTP {e.response.status_code}: {e.response.text[:200]}",
                operation=operation,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(str(e) or e.__class__.__name__, operation=operation) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedDataError(f"{operation}: response is not JSON", raw=response.text[:200]) from e

    @staticmethod
    def _expect_list(operation: str, data: Any) -> List[Dict[str, Any]]:
        if not isinstance(data, list):
            raise MalformedDataError(f"{operation}: expected a list, got {type(data).__name__}")
        return [item for item in data if isinstance(item, dict)]

    async def fetch_daily_tasks(self) -> List[DailyTask]:
        data = await self._request("fetch_daily_tasks", "GET", "/daily")
        return [DailyTask.from_dict(item) for item in self._expect_list("fetch_daily_tasks", data)]

    async def fetch_career_goals(self) -> List[CareerGoal]:
        data = await self._request("fetch_career_goals", "GET", "/career")
        return [CareerGoal.from_dict(item) for item in self._expect_list("fetch_career_goals", data)]

    async def fetch_insights(self) -> Dict[str, float]:
        data = await self._request("fetch_insights", "GET", "/insights")
        if not isinstance(data, dict):
            raise MalformedDataError(f"fetch_insights: expected a mapping, got {type(data).__name__}")
        return parse_insights(data)

    async def toggle_daily_completion(self, task_id: str, day_index: int) -> None:
        await self._request(
            "toggle_daily_completion",
            "POST",
            "/daily/toggle",
            {"taskId": task_id, "dayIndex": day_index},
        )

    async def toggle_career_goal(self, goal_id: str) -> None:
        await self._request("toggle_career_goal", "POST", "/career/toggle", {"goalId": goal_id})

    async def add_task(
        self,
        label: str,
        category: Category,
        time_slot: Optional[str] = None,
    ) -> DailyTask:
        data = await self._request(
            "add_task",
            "POST",
            "/daily",
            {"label": label, "category": Category.parse(category).value, "timeSlot": time_slot},
        )
        if not isinstance(data, dict):
            raise MalformedDataError("add_task: expected the created task")
        return DailyTask.from_dict(data)

    async def delete_task(self, task_id: str) -> None:
        await self._request("delete_task", "DELETE", f"/daily/{task_id}")
