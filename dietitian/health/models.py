# -*- coding: utf-8 -*-
"""Health data — Pydantic models (blood glucose)."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


GlucoseCategory = Literal["low", "normal", "high", "critical"]
GlucoseTrend = Literal["rising", "falling", "stable"]


class GlucoseReading(BaseModel):
    value: float = Field(..., gt=0, lt=1000)
    unit: str = "mg/dL"
    timestamp: datetime
    source: str = "HealthKit"
    category: Optional[GlucoseCategory] = None
    is_real_data: bool = True


class GlucoseSyncRequest(BaseModel):
    device_id: str = Field(default="default", min_length=1, max_length=128)
    readings: List[GlucoseReading] = Field(..., min_length=1)


class GlucoseSyncResponse(BaseModel):
    sync_id: str
    saved: int


class GlucoseLatestResponse(BaseModel):
    reading: GlucoseReading
    message: str
    trend: GlucoseTrend


class GlucoseHistoryResponse(BaseModel):
    days: int
    is_real_data: bool
    readings: List[GlucoseReading]
