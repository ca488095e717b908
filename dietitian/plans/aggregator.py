# -*- coding: utf-8 -*-
"""Daily-average nutrition over a canonical week."""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional

from ..meals.extractor import coerce_float
from .models import NutrientTotals
from .normalizer import detect_plan_type, resolve_week


def _num(value: Any) -> float:
    # Falsy values and unparsable strings count as 0.
    if not value:
        return 0.0
    number = coerce_float(value)
    return number if number is not None else 0.0


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def _totals_from_mapping(data: Mapping[str, Any]) -> NutrientTotals:
    return NutrientTotals(
        calories=_num(data.get("calories")),
        protein=_num(data.get("protein")),
        carbs=_num(data.get("carbohydrates") or data.get("carbs")),
        fat=_num(data.get("fat")),
    )


def aggregate_week(
    canonical_week: Any,
    prior_week: Optional[Mapping[str, Any]] = None,
) -> NutrientTotals:
    """Average the per-day `nutrients` snapshots of one week source.

    A previously persisted week wins over the current one; exactly one
    of them is read. Only days carrying a `nutrients` mapping count toward the
    divisor, so a week with 5 resolvable days is averaged over 5.
    """
    if isinstance(prior_week, Mapping) and prior_week:
        source: Any = prior_week
    else:
        source = canonical_week
    if not isinstance(source, Mapping):
        return NutrientTotals()

    calories = protein = carbs = fat = 0.0
    days = 0
    for day in source.values():
        if not isinstance(day, Mapping):
            continue
        nutrients = day.get("nutrients")
        if not isinstance(nutrients, Mapping):
            continue
        day_totals = _totals_from_mapping(nutrients)
        calories += day_totals.calories
        protein += day_totals.protein
        carbs += day_totals.carbs
        fat += day_totals.fat
        days += 1

    if days == 0:
        return NutrientTotals()
    return NutrientTotals(
        calories=calories / days,
        protein=protein / days,
        carbs=carbs / days,
        fat=fat / days,
    )


def plan_nutrition_summary(plan_doc: Any, prior_doc: Any = None) -> NutrientTotals:
    if not isinstance(plan_doc, Mapping):
        return NutrientTotals()
    stored = plan_doc.get("dailyAverageNutrition")
    if detect_plan_type(plan_doc) == "manual" and isinstance(stored, Mapping):
        return _totals_from_mapping(stored)

    # Raw stored days: a day holding only `nutrients` still counts.
    week = resolve_week(plan_doc)
    prior_week = resolve_week(prior_doc) if prior_doc is not None else None
    return aggregate_week(week, prior_week)


def summarize_meals(meals: Iterable[Any]) -> NutrientTotals:
    """Whole-number totals across a flat list of meals."""
    calories = protein = carbs = fat = 0.0
    for meal in meals or []:
        if not isinstance(meal, Mapping):
            continue
        nutrition = meal.get("nutrition")
        if not isinstance(nutrition, Mapping):
            nutrition = meal
        calories += _num(nutrition.get("calories") or meal.get("calories"))
        protein += _num(nutrition.get("protein") or meal.get("protein"))
        carbs += _num(nutrition.get("carbs") or nutrition.get("carbohydrates") or meal.get("carbs"))
        fat += _num(nutrition.get("fat") or meal.get("fat"))
    return NutrientTotals(
        calories=_round_half_up(calories),
        protein=_round_half_up(protein),
        carbs=_round_half_up(carbs),
        fat=_round_half_up(fat),
    )


def daily_average(total: NutrientTotals, duration: int) -> NutrientTotals:
    if duration <= 0:
        return NutrientTotals()
    return NutrientTotals(
        calories=_round_half_up(total.calories / duration),
        protein=_round_half_up(total.protein / duration),
        carbs=_round_half_up(total.carbs / duration),
        fat=_round_half_up(total.fat / duration),
    )
