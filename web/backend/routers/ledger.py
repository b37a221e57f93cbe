"""
Ledger Store CRUD surface.
"""
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from core.local_store import LocalLedgerStore
from core.models import Category

router = APIRouter()


class DailyToggleRequest(BaseModel):
    taskId: str
    dayIndex: int = Field(ge=0, le=6)


class CareerToggleRequest(BaseModel):
    goalId: str


class AddTaskRequest(BaseModel):
    label: str = Field(min_length=1)
    category: Category
    timeSlot: Optional[str] = None


class AddGoalRequest(BaseModel):
    label: str = Field(min_length=1)


def _store(request: Request) -> LocalLedgerStore:
    return request.app.state.store


@router.get("/daily")
async def list_daily(request: Request):
    tasks = await _store(request).fetch_daily_tasks()
    return [t.to_dict() for t in tasks]


@router.post("/daily")
async def add_daily(req: AddTaskRequest, request: Request):
    task = await _store(request).add_task(req.label.strip(), req.category, req.timeSlot)
    return task.to_dict()


@router.delete("/daily/{task_id}")
async def delete_daily(task_id: str, request: Request):
    await _store(request).delete_task(task_id)
    return {"success": True, "id": task_id}


@router.post("/daily/toggle")
async def toggle_daily(req: DailyToggleRequest, request: Request):
    await _store(request).toggle_daily_completion(req.taskId, req.dayIndex)
    return {"success": True}


@router.get("/career")
async def list_career(request: Request):
    goals = await _store(request).fetch_career_goals()
    return [g.to_dict() for g in goals]


@router.post("/career")
async def add_career(req: AddGoalRequest, request: Request):
    goal = await _store(request).add_goal(req.label.strip())
    return goal.to_dict()


@router.post("/career/toggle")
async def toggle_career(req: CareerToggleRequest, request: Request):
    await _store(request).toggle_career_goal(req.goalId)
    return {"success": True}


@router.get("/insights")
async def list_insights(request: Request):
    return await _store(request).fetch_insights()
