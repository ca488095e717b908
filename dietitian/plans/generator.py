# -*- coding: utf-8 -*-
"""Meal plan generation, meal swapping and shopping lists."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple

from fastapi import HTTPException

from ..recipes.client import RecipeClient
from ..recipes.shopping import generate_shopping_list
from .aggregator import plan_nutrition_summary
from .models import MealPlanPreferences, NutrientTotals
from .normalizer import MEAL_SLOTS, detect_plan_type, iter_meals, normalize_week, resolve_week
from .storage import require_plan, save_ai_plan, update_plan

logger = logging.getLogger(__name__)


def preferences_to_params(preferences: MealPlanPreferences) -> Dict[str, Any]:
    return {
        "timeFrame": preferences.time_frame,
        "targetCalories": preferences.target_calories,
        "diet": preferences.diet,
        "exclude": preferences.exclude,
        "randomSeed": preferences.random_seed or int(time.time() * 1000),
    }


async def generate_ai_plan(
    *,
    client: RecipeClient,
    owner: Mapping[str, Any],
    preferences: MealPlanPreferences,
    patient_id: Optional[str] = None,
) -> Tuple[Dict[str, Any], NutrientTotals]:
    created_by = owner.get("user_type") or "patient"
    raw = await client.generate_meal_plan(preferences_to_params(preferences))
    if not normalize_week(resolve_week(raw)):
        logger.warning("Generated meal plan has no usable days")
    doc = save_ai_plan(
        owner_id=owner["id"],
        plan=raw,
        created_by=created_by,
        patient_id=patient_id,
    )
    return doc, plan_nutrition_summary(doc)


def _raw_week_container(doc: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    # Same lookup order as resolve_week, but returns the live mapping so it can be edited.
    if isinstance(doc.get("week"), dict):
        return doc["week"]
    meal_plan = doc.get("mealPlan")
    if isinstance(meal_plan, dict) and isinstance(meal_plan.get("week"), dict):
        return meal_plan["week"]
    if detect_plan_type(doc) == "manual":
        return doc
    return None


def replace_meal(doc: Dict[str, Any], day: str, slot: str, meal: Dict[str, Any]) -> bool:
    """Put `meal` into `doc` at day/slot, keeping the day's stored shape."""
    container = _raw_week_container(doc)
    if container is None or not isinstance(container.get(day), dict):
        return False
    raw_day = container[day]
    meals = raw_day.get("meals")
    if isinstance(meals, list):
        index = MEAL_SLOTS.index(slot)
        while len(meals) <= index:
            meals.append(None)
        meals[index] = meal
    else:
        raw_day[slot] = meal
    return True


async def swap_meal(
    *,
    client: RecipeClient,
    plan_id: str,
    day: str,
    slot: str,
) -> Tuple[Dict[str, Any], Dict[str, Any], NutrientTotals]:
    doc = require_plan(plan_id)
    week = normalize_week(resolve_week(doc))
    if day not in week:
        raise HTTPException(status_code=404, detail=f"No plan for {day}")
    current = week[day].get(slot) or {}

    alternatives = await client.find_alternative_recipes(current, slot)
    if not alternatives:
        raise HTTPException(status_code=503, detail="No alternative recipes available. Please try again.")
    replacement = alternatives[0]

    replace_meal(doc, day, slot, replacement)
    updated = update_plan(plan_id, doc)
    logger.info("Swapped %s %s in plan %s", day, slot, plan_id)
    return updated, replacement, plan_nutrition_summary(updated)


def plan_meals(doc: Mapping[str, Any]) -> List[Any]:
    return [meal for _, _, meal in iter_meals(normalize_week(resolve_week(doc)))]


def shopping_list_for_plan(doc: Mapping[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
    return generate_shopping_list(plan_meals(doc))
