"""
Read-only derived views: momentum, month calendar, trailing heatmap, medications.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from core.aggregator import weekly_summary
from core.calendar_projector import month_grid_to_dict, project_month, project_trailing_window
from core.clock import is_sunday, today_index
from core.config_manager import config
from core.medication import medication_schedule

router = APIRouter()


@router.get("/momentum")
async def get_momentum(request: Request):
    store = request.app.state.store
    today = request.app.state.clock.today()
    tasks = await store.fetch_daily_tasks()
    goals = await store.fetch_career_goals()
    summary = weekly_summary(tasks, goals, today_index(today))
    summary["date"] = today.isoformat()
    return summary


@router.get("/calendar")
async def get_calendar(
    request: Request,
    year: Optional[int] = Query(None, ge=1, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
):
    store = request.app.state.store
    today = request.app.state.clock.today()
    year = year or today.year
    month = month or today.month
    try:
        cells = project_month(
            year,
            month,
            today,
            await store.fetch_insights(),
            await store.fetch_daily_tasks(),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"year": year, "month": month, "cells": month_grid_to_dict(cells)}


@router.get("/heatmap")
async def get_heatmap(request: Request, days: Optional[int] = Query(None, ge=1, le=366)):
    store = request.app.state.store
    today = request.app.state.clock.today()
    window = project_trailing_window(days or config.HEATMAP_WINDOW_DAYS, today, await store.fetch_insights())
    return {"days": [d.to_dict() for d in window]}


@router.get("/medications")
async def get_medications(request: Request):
    today = request.app.state.clock.today()
    return [slot.to_dict() for slot in medication_schedule(is_sunday(today))]
