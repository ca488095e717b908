# -*- coding: utf-8 -*-
"""Meal logging endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user, require_doctor
from ..patients.storage import ensure_patient_access
from .models import (
    MealLog,
    MealLogCreateRequest,
    MealLogListResponse,
    MealLogStatistics,
    PatientMealSummary,
)
from .storage import (
    delete_meal_log,
    filter_meal_logs,
    get_meal_log,
    list_meal_logs,
    meal_log_statistics,
    patient_meal_summary,
    save_meal_log,
)

router = APIRouter(prefix="/api/meal-logs", tags=["Meal Logs"])


@router.post("", response_model=MealLog, summary="Log a meal")
def create_meal_log(request: MealLogCreateRequest, user: dict = Depends(get_current_user)):
    return save_meal_log(
        user_id=user["id"],
        meal_type=request.meal_type,
        meal=request.meal,
        photo_uri=request.photo_uri,
        device_timestamp=request.device_timestamp,
    )


@router.get("", response_model=MealLogListResponse, summary="List meal logs")
def get_meal_logs(
    patient_id: Optional[str] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    meal_type: Optional[str] = Query(default=None),
    start: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    end: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    user: dict = Depends(get_current_user),
):
    target = patient_id or user["id"]
    ensure_patient_access(user, target)
    if meal_type or start or end:
        items = filter_meal_logs(target, meal_type=meal_type, start=start, end=end, limit=limit)
    else:
        items = list_meal_logs(target, limit=limit, day=date)
    return MealLogListResponse(count=len(items), items=items)


@router.get("/statistics", response_model=MealLogStatistics, summary="Meal log statistics")
def get_statistics(
    days: int = Query(default=7, ge=1, le=365),
    patient_id: Optional[str] = Query(default=None),
    user: dict = Depends(get_current_user),
):
    target = patient_id or user["id"]
    ensure_patient_access(user, target)
    return meal_log_statistics(target, days=days)


@router.get("/summary/{patient_id}", response_model=PatientMealSummary, summary="Patient meal summary")
def get_patient_summary(
    patient_id: str,
    days: int = Query(default=30, ge=1, le=365),
    user: dict = Depends(require_doctor),
):
    ensure_patient_access(user, patient_id)
    return patient_meal_summary(patient_id, days=days)


@router.delete("/{log_id}", summary="Delete a meal log")
def remove_meal_log(log_id: str, user: dict = Depends(get_current_user)):
    log = get_meal_log(log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Meal log not found")
    ensure_patient_access(user, log["user_id"])
    delete_meal_log(log_id)
    return {"status": "deleted", "id": log_id}
