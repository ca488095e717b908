# -*- coding: utf-8 -*-
"""Meal-plan shape normalizer.

Two day shapes exist in stored plans:

* array shape (recipe source plans): ``{"meals": [B, L, D], "nutrients": {...}}``
* named shape (doctor-authored plans): ``{"breakfast": B, "lunch": L, "dinner": D}``

Both are parsed into a small tagged union at the boundary and rendered back into
the named form, so downstream code only ever sees
``week -> day -> {breakfast, lunch, dinner}``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

MEAL_SLOTS: Tuple[str, ...] = ("breakfast", "lunch", "dinner")
DAY_NAMES: Tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

PlanType = Literal["manual", "ai"]


@dataclass(frozen=True)
class ArrayDay:
    meals: List[Any]
    nutrients: Any = None


@dataclass(frozen=True)
class NamedDay:
    slots: Dict[str, Any]
    # Anything besides the three slots (nutrients, notes, ...) is carried through as-is.
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def nutrients(self) -> Any:
        return self.extra.get("nutrients")


DayPlan = Union[ArrayDay, NamedDay]


def parse_day(raw: Any) -> Optional[DayPlan]:
    if not isinstance(raw, Mapping):
        return None
    meals = raw.get("meals")
    if isinstance(meals, (list, tuple)):
        return ArrayDay(meals=list(meals), nutrients=raw.get("nutrients"))
    if any(slot in raw for slot in MEAL_SLOTS):
        slots = {slot: raw.get(slot) for slot in MEAL_SLOTS}
        extra = {k: v for k, v in raw.items() if k not in MEAL_SLOTS}
        return NamedDay(slots=slots, extra=extra)
    return None


def render_day(day: DayPlan) -> Dict[str, Any]:
    if isinstance(day, ArrayDay):
        out: Dict[str, Any] = {}
        for index, slot in enumerate(MEAL_SLOTS):
            out[slot] = day.meals[index] if index < len(day.meals) else None
        out["nutrients"] = day.nutrients
        return out
    out = dict(day.extra)
    out.update(day.slots)
    return out


def normalize_day(raw: Any) -> Optional[Dict[str, Any]]:
    parsed = parse_day(raw)
    if parsed is None:
        return None
    return render_day(parsed)


def normalize_week(raw_week: Any) -> Dict[str, Dict[str, Any]]:
    """Normalize every day of `raw_week`; unrecognized days are logged and left out."""
    if not isinstance(raw_week, Mapping):
        return {}
    week: Dict[str, Dict[str, Any]] = {}
    for day_name, raw_day in raw_week.items():
        day = normalize_day(raw_day)
        if day is None:
            logger.warning("Unrecognized meal-plan day shape for %r; skipping", day_name)
            continue
        week[day_name] = day
    return week


def detect_plan_type(plan_doc: Any) -> PlanType:
    if not isinstance(plan_doc, Mapping):
        return "ai"
    if plan_doc.get("type") == "manual" or plan_doc.get("planType") == "manual":
        return "manual"
    plan_id = plan_doc.get("id")
    if isinstance(plan_id, str) and "_manual_" in plan_id:
        return "manual"
    return "ai"


def _days_only(doc: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if isinstance(k, str) and k.lower() in DAY_NAMES}


def resolve_week(plan_doc: Any) -> Optional[Dict[str, Any]]:
    """Locate the raw week inside a stored plan document.

    Tried in order: ``week``, ``mealPlan.week``, then (manual plans only) the
    document itself, keeping just its day-named entries.
    """
    if not isinstance(plan_doc, Mapping):
        return None
    week = plan_doc.get("week")
    if isinstance(week, Mapping):
        return dict(week)
    meal_plan = plan_doc.get("mealPlan")
    if isinstance(meal_plan, Mapping) and isinstance(meal_plan.get("week"), Mapping):
        return dict(meal_plan["week"])
    if detect_plan_type(plan_doc) == "manual":
        return _days_only(plan_doc)
    return None


def canonical_plan(plan_doc: Any) -> Dict[str, Any]:
    plan_id = plan_doc.get("id") if isinstance(plan_doc, Mapping) else None
    return {
        "plan_id": plan_id,
        "plan_type": detect_plan_type(plan_doc),
        "week": normalize_week(resolve_week(plan_doc)),
    }


def iter_meals(canonical_week: Mapping[str, Any]) -> Iterator[Tuple[str, str, Any]]:
    for day_name, day in canonical_week.items():
        if not isinstance(day, Mapping):
            continue
        for slot in MEAL_SLOTS:
            meal = day.get(slot)
            if meal is not None:
                yield day_name, slot, meal
