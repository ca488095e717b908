# -*- coding: utf-8 -*-
"""Meal plan endpoints (AI + doctor-authored manual plans)."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user, is_doctor, require_doctor
from ..patients.storage import ensure_patient_access, is_assigned
from ..recipes.client import RecipeClient, get_recipe_client
from .aggregator import plan_nutrition_summary
from .generator import generate_ai_plan, shopping_list_for_plan, swap_meal
from .models import (
    GenerateMealPlanRequest,
    ManualMealPlanRequest,
    MealPlanResponse,
    NutrientTotals,
    ShoppingListItem,
    ShoppingListResponse,
    SwapMealRequest,
)
from .normalizer import canonical_plan
from .storage import create_manual_plan, get_current_week_plan, require_plan

router = APIRouter(prefix="/api/meal-plans", tags=["Meal Plans"])


def _ensure_plan_access(user: Dict[str, Any], doc: Dict[str, Any]) -> None:
    if user["id"] in (doc.get("patientId"), doc.get("doctorId")):
        return
    patient_id = doc.get("patientId")
    if is_doctor(user) and patient_id and is_assigned(doctor_id=user["id"], patient_id=patient_id):
        return
    raise HTTPException(status_code=403, detail="Not allowed to access this meal plan")


def plan_response(doc: Dict[str, Any]) -> MealPlanResponse:
    canonical = canonical_plan(doc)
    return MealPlanResponse(
        plan_id=doc["id"],
        plan_type=canonical["plan_type"],
        patient_id=doc.get("patientId"),
        doctor_id=doc.get("doctorId"),
        status=doc.get("status") or "active",
        week=canonical["week"],
        nutrition=plan_nutrition_summary(doc),
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


@router.post("/generate", response_model=MealPlanResponse, summary="Generate a weekly plan from the recipe source")
async def generate_plan(
    request: GenerateMealPlanRequest,
    user: dict = Depends(get_current_user),
    client: RecipeClient = Depends(get_recipe_client),
):
    if request.patient_id:
        ensure_patient_access(user, request.patient_id)
    doc, _ = await generate_ai_plan(
        client=client,
        owner=user,
        preferences=request.preferences,
        patient_id=request.patient_id,
    )
    return plan_response(doc)


@router.get("/current", response_model=MealPlanResponse, summary="Get the current plan for a patient")
def get_current_plan(
    patient_id: Optional[str] = Query(default=None),
    user: dict = Depends(get_current_user),
):
    target = patient_id or user["id"]
    ensure_patient_access(user, target)
    doc = get_current_week_plan(target)
    if not doc:
        raise HTTPException(status_code=404, detail="No meal plan found for current week")
    return plan_response(doc)


@router.post("/manual", response_model=MealPlanResponse, summary="Create a doctor-authored plan")
def create_manual(
    request: ManualMealPlanRequest,
    user: dict = Depends(require_doctor),
):
    ensure_patient_access(user, request.patient_id)
    doc = create_manual_plan(
        doctor_id=user["id"],
        patient_id=request.patient_id,
        duration=request.duration,
        week=request.week,
        total_nutrition=request.total_nutrition,
    )
    return plan_response(doc)


@router.get("/{plan_id}", response_model=MealPlanResponse, summary="Get a meal plan")
def get_plan_api(plan_id: str, user: dict = Depends(get_current_user)):
    doc = require_plan(plan_id)
    _ensure_plan_access(user, doc)
    return plan_response(doc)


@router.post("/{plan_id}/swap", response_model=MealPlanResponse, summary="Swap one meal for an alternative")
async def swap_meal_api(
    plan_id: str,
    request: SwapMealRequest,
    user: dict = Depends(get_current_user),
    client: RecipeClient = Depends(get_recipe_client),
):
    _ensure_plan_access(user, require_plan(plan_id))
    doc, _, _ = await swap_meal(client=client, plan_id=plan_id, day=request.day, slot=request.slot)
    return plan_response(doc)


@router.get("/{plan_id}/nutrition", response_model=NutrientTotals, summary="Daily average nutrition of a plan")
def get_plan_nutrition(plan_id: str, user: dict = Depends(get_current_user)):
    doc = require_plan(plan_id)
    _ensure_plan_access(user, doc)
    return plan_nutrition_summary(doc)


@router.get("/{plan_id}/shopping-list", response_model=ShoppingListResponse, summary="Shopping list for a plan")
def get_shopping_list(plan_id: str, user: dict = Depends(get_current_user)):
    doc = require_plan(plan_id)
    _ensure_plan_access(user, doc)
    grouped = shopping_list_for_plan(doc)
    return ShoppingListResponse(
        plan_id=plan_id,
        aisles={aisle: [ShoppingListItem(**item) for item in items] for aisle, items in grouped.items()},
    )
