# -*- coding: utf-8 -*-
"""Shopping list from a set of meals, grouped by store aisle."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from ..meals.extractor import coerce_float


def generate_shopping_list(meals: Iterable[Any]) -> Dict[str, List[Dict[str, Any]]]:
    """Sum `extendedIngredients` amounts by ingredient name.

    Meals without an id are skipped. Meals without ingredient detail get a single
    placeholder line ("Ingredients for <title>").
    """
    items: Dict[str, Dict[str, Any]] = {}
    for meal in meals or []:
        if not isinstance(meal, Mapping) or not meal.get("id"):
            continue
        ingredients = meal.get("extendedIngredients")
        if isinstance(ingredients, list):
            for ingredient in ingredients:
                if not isinstance(ingredient, Mapping):
                    continue
                name = ingredient.get("name") or ingredient.get("original")
                if not name:
                    continue
                amount = coerce_float(ingredient.get("amount")) or 1.0
                if name in items:
                    items[name]["amount"] += amount
                else:
                    items[name] = {
                        "name": name,
                        "amount": amount,
                        "unit": ingredient.get("unit") or "",
                        "aisle": ingredient.get("aisle") or "Other",
                    }
        else:
            label = f"Ingredients for {meal.get('title') or meal.get('name')}"
            items.setdefault(label, {"name": label, "amount": 1.0, "unit": "", "aisle": "Other"})

    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for item in items.values():
        grouped.setdefault(item["aisle"] or "Other", []).append(item)
    return grouped
