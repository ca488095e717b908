# -*- coding: utf-8 -*-
"""Meal plans — Pydantic models."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class NutrientTotals(BaseModel):
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


MealSlot = Literal["breakfast", "lunch", "dinner"]


class MealPlanPreferences(BaseModel):
    diet: Optional[str] = None
    target_calories: Optional[int] = Field(default=None, ge=500, le=6000)
    exclude: Optional[str] = None
    time_frame: Literal["day", "week"] = "week"
    random_seed: Optional[int] = None


class GenerateMealPlanRequest(BaseModel):
    patient_id: Optional[str] = None
    preferences: MealPlanPreferences = Field(default_factory=MealPlanPreferences)


class ManualMealPlanRequest(BaseModel):
    patient_id: str = Field(..., min_length=1)
    duration: int = Field(..., ge=1, le=28)
    week: Dict[str, Any]
    total_nutrition: NutrientTotals


class SwapMealRequest(BaseModel):
    day: str = Field(..., min_length=1)
    slot: MealSlot


class MealPlanResponse(BaseModel):
    plan_id: str
    plan_type: Literal["manual", "ai"]
    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None
    status: str
    week: Dict[str, Any]
    nutrition: NutrientTotals
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ShoppingListItem(BaseModel):
    name: str
    amount: float = 0.0
    unit: str = ""
    aisle: str = "Other"


class ShoppingListResponse(BaseModel):
    plan_id: str
    aisles: Dict[str, List[ShoppingListItem]]
