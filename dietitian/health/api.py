# -*- coding: utf-8 -*-
"""Health data endpoints (blood glucose)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import GlucoseHistoryResponse, GlucoseLatestResponse, GlucoseSyncRequest, GlucoseSyncResponse
from .storage import glucose_message, glucose_trend, latest_reading, load_readings, reading_history, save_readings

router = APIRouter(prefix="/api/health/glucose", tags=["Health"])


@router.post("/sync", response_model=GlucoseSyncResponse, summary="Upload glucose readings from the device")
def sync_glucose(request: GlucoseSyncRequest, user: dict = Depends(get_current_user)):
    sync_id = save_readings(user["id"], request.readings, device_id=request.device_id)
    return GlucoseSyncResponse(sync_id=sync_id, saved=len(request.readings))


@router.get("/latest", response_model=GlucoseLatestResponse, summary="Latest glucose reading")
def get_latest(user: dict = Depends(get_current_user)):
    reading = latest_reading(user["id"])
    trend = glucose_trend(load_readings(user["id"])) if reading.is_real_data else "stable"
    return GlucoseLatestResponse(reading=reading, message=glucose_message(reading.category), trend=trend)


@router.get("/history", response_model=GlucoseHistoryResponse, summary="Glucose history")
def get_history(
    days: int = Query(default=7, ge=1, le=90),
    user: dict = Depends(get_current_user),
):
    readings = reading_history(user["id"], days=days)
    return GlucoseHistoryResponse(
        days=days,
        is_real_data=bool(readings) and readings[0].is_real_data,
        readings=readings,
    )
