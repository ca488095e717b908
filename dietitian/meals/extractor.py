# -*- coding: utf-8 -*-
"""Best-effort calorie/macro extraction from heterogeneous meal objects.

Meals arrive from the recipe source (calories buried in `nutrition.nutrients[]`)
or from doctors' hand-written plans (flat `calories`). None of the helpers here
raise on malformed input; the calorie lookup always ends in a number.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional


FALLBACK_CALORIES: Dict[str, float] = {
    "breakfast": 350.0,
    "lunch": 500.0,
    "dinner": 600.0,
}
DEFAULT_FALLBACK_CALORIES = 400.0

# readyInMinutes above this is assumed to be a mis-tagged calorie value.
MISFILED_READY_TIME_THRESHOLD = 100

_NUM_RE = re.compile(r"-?\d+(?:\.\d+)?")


def coerce_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        m = _NUM_RE.search(s.replace(",", ""))
        if not m:
            return None
        try:
            return float(m.group(0))
        except ValueError:
            return None
    return None


def _truthy_number(value: Any) -> Optional[float]:
    # 0, "", None and non-numeric values do not count as "present".
    if not value:
        return None
    number = coerce_float(value)
    if not number:
        return None
    return number


def _nutrients(meal: Mapping[str, Any]) -> list:
    nutrition = meal.get("nutrition")
    if not isinstance(nutrition, Mapping):
        return []
    nutrients = nutrition.get("nutrients")
    if not isinstance(nutrients, list):
        return []
    return [n for n in nutrients if isinstance(n, Mapping)]


def _calorie_nutrient(meal: Mapping[str, Any]) -> Optional[float]:
    for nutrient in _nutrients(meal):
        label = nutrient.get("name") or nutrient.get("title")
        if isinstance(label, str) and "calorie" in label.lower():
            return coerce_float(nutrient.get("amount"))
    return None


def misfiled_ready_time_calories(meal: Mapping[str, Any]) -> Optional[float]:
    """Return `readyInMinutes` when it looks like a calorie count filed under the wrong key.

    Some upstream recipe payloads put the calorie total into `readyInMinutes`.
    A meal qualifies when its `calories` field is missing or falsy (generated
    plans carry `calories: 0`) and the value exceeds 100.
    """
    if not isinstance(meal, Mapping) or meal.get("calories"):
        return None
    ready = coerce_float(meal.get("readyInMinutes"))
    if ready is None or ready <= MISFILED_READY_TIME_THRESHOLD:
        return None
    return ready


def fallback_calories(meal_type: Optional[str]) -> float:
    if isinstance(meal_type, str):
        return FALLBACK_CALORIES.get(meal_type.strip().lower(), DEFAULT_FALLBACK_CALORIES)
    return DEFAULT_FALLBACK_CALORIES


def extract_calories(meal: Any, meal_type: Optional[str] = None) -> float:
    """Resolve one calorie number for `meal`, first match wins.

    1. `meal.calories`
    2. `meal.nutrition.calories`
    3. first `meal.nutrition.nutrients[]` entry whose name contains "calorie"
    4. `misfiled_ready_time_calories`
    5. per-meal-type constant (breakfast 350, lunch 500, dinner 600, else 400)
    """
    if not isinstance(meal, Mapping):
        return fallback_calories(meal_type)

    direct = _truthy_number(meal.get("calories"))
    if direct is not None:
        return direct

    nutrition = meal.get("nutrition")
    if isinstance(nutrition, Mapping):
        nested = _truthy_number(nutrition.get("calories"))
        if nested is not None:
            return nested

    from_nutrients = _calorie_nutrient(meal)
    if from_nutrients is not None:
        return from_nutrients

    misfiled = misfiled_ready_time_calories(meal)
    if misfiled is not None:
        return misfiled

    return fallback_calories(meal_type)


def nutrient_amount(meal: Any, name: str, default: float = 0.0) -> float:
    """Amount of the first `nutrition.nutrients[]` entry named `name` (case-insensitive)."""
    if not isinstance(meal, Mapping):
        return default
    wanted = name.strip().lower()
    for nutrient in _nutrients(meal):
        n = nutrient.get("name")
        if isinstance(n, str) and n.strip().lower() == wanted:
            amount = coerce_float(nutrient.get("amount"))
            return default if amount is None else amount
    return default
