# -*- coding: utf-8 -*-
"""Meal logs — Pydantic models."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field


MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class MealLogCreateRequest(BaseModel):
    meal_type: MealType
    meal: Dict[str, Any]
    photo_uri: Optional[str] = None
    device_timestamp: Optional[str] = None


class MealSnapshot(BaseModel):
    id: Any = None
    title: Optional[str] = None
    image: Optional[str] = None
    calories: float = 0.0
    prepTime: Any = None
    servings: Any = 1


class MealLog(BaseModel):
    id: str
    user_id: str
    meal_type: str
    meal_data: MealSnapshot
    photo_uri: Optional[str] = None
    date: str
    logged_at: str
    device_timestamp: Optional[str] = None
    logged_from: str = "mobile_app"
    status: str = "logged"


class MealLogListResponse(BaseModel):
    count: int
    items: list[MealLog]


class DateRange(BaseModel):
    start: str
    end: str


class MealLogStatistics(BaseModel):
    total_logs: int = 0
    average_per_day: float = 0.0
    total_calories: float = 0.0
    average_calories_per_day: float = 0.0
    meal_type_counts: Dict[str, int] = Field(default_factory=dict)
    days_analyzed: int
    date_range: DateRange
    target_user_id: str


class PatientMealSummary(BaseModel):
    patient_id: str
    recent_logs_count: int
    todays_logs_count: int
    statistics: MealLogStatistics
    last_logged_date: Optional[str] = None
    has_recent_activity: bool
    average_daily_logs: float
    total_calories: float
    generated_at: str
