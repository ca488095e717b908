# -*- coding: utf-8 -*-
"""Static recipe data served when the recipe source is unreachable."""

from __future__ import annotations

import copy
from typing import Any, Dict, List

_IMG = "https://spoonacular.com/recipeImages/"
_PLACEHOLDER = "https://via.placeholder.com/300x200?text="

_FALLBACK_WEEK: Dict[str, Any] = {
    "monday": {
        "meals": [
            {"id": 643514, "title": "Fresh Herb Omelette", "image": _IMG + "Fresh-Herb-Omelette-643514.jpg",
             "readyInMinutes": 45, "servings": 1, "calories": 350},
            {"id": 639320, "title": "Chorizo and egg bake", "image": _IMG + "Chorizo-and-egg-bake-639320.jpg",
             "readyInMinutes": 30, "servings": 3, "calories": 450},
            {"id": 1697585, "title": "Cabbage and Sausage Casserole",
             "image": _IMG + "cabbage-and-sausage-casserole-1697585.jpg",
             "readyInMinutes": 165, "servings": 2, "calories": 500},
        ],
        "nutrients": {"calories": 1300, "carbohydrates": 40, "fat": 100, "protein": 80},
    },
    "tuesday": {
        "meals": [
            {"id": 643515, "title": "Scrambled Eggs with Toast", "image": _IMG + "Fresh-Herb-Omelette-643514.jpg",
             "readyInMinutes": 15, "servings": 1, "calories": 300},
            {"id": 639321, "title": "Grilled Chicken Salad", "image": _IMG + "Chorizo-and-egg-bake-639320.jpg",
             "readyInMinutes": 25, "servings": 1, "calories": 400},
            {"id": 1697586, "title": "Beef Stir Fry", "image": _IMG + "cabbage-and-sausage-casserole-1697585.jpg",
             "readyInMinutes": 30, "servings": 2, "calories": 550},
        ],
        "nutrients": {"calories": 1250, "carbohydrates": 35, "fat": 95, "protein": 85},
    },
    "wednesday": {
        "meals": [
            {"id": 643516, "title": "Avocado Toast", "image": _IMG + "Fresh-Herb-Omelette-643514.jpg",
             "readyInMinutes": 10, "servings": 1, "calories": 280},
            {"id": 639322, "title": "Turkey Wrap", "image": _IMG + "Chorizo-and-egg-bake-639320.jpg",
             "readyInMinutes": 15, "servings": 1, "calories": 380},
            {"id": 1697587, "title": "Salmon with Vegetables",
             "image": _IMG + "cabbage-and-sausage-casserole-1697585.jpg",
             "readyInMinutes": 35, "servings": 1, "calories": 520},
        ],
        "nutrients": {"calories": 1180, "carbohydrates": 30, "fat": 85, "protein": 90},
    },
}

_FALLBACK_RECIPES: Dict[str, List[Dict[str, Any]]] = {
    "breakfast": [
        {"id": 1, "name": "Scrambled Eggs", "image": _PLACEHOLDER + "Scrambled+Eggs", "calories": 300,
         "prepTime": 10, "nutrition": {"calories": 300, "protein": 20, "carbs": 5, "fat": 25}},
        {"id": 2, "name": "Oatmeal with Berries", "image": _PLACEHOLDER + "Oatmeal", "calories": 250,
         "prepTime": 5, "nutrition": {"calories": 250, "protein": 8, "carbs": 45, "fat": 5}},
    ],
    "lunch": [
        {"id": 3, "name": "Grilled Chicken Salad", "image": _PLACEHOLDER + "Chicken+Salad", "calories": 400,
         "prepTime": 20, "nutrition": {"calories": 400, "protein": 35, "carbs": 15, "fat": 20}},
        {"id": 4, "name": "Turkey Sandwich", "image": _PLACEHOLDER + "Turkey+Sandwich", "calories": 350,
         "prepTime": 5, "nutrition": {"calories": 350, "protein": 25, "carbs": 30, "fat": 15}},
    ],
    "dinner": [
        {"id": 5, "name": "Grilled Salmon", "image": _PLACEHOLDER + "Grilled+Salmon", "calories": 500,
         "prepTime": 25, "nutrition": {"calories": 500, "protein": 40, "carbs": 10, "fat": 30}},
        {"id": 6, "name": "Beef Stir Fry", "image": _PLACEHOLDER + "Beef+Stir+Fry", "calories": 450,
         "prepTime": 30, "nutrition": {"calories": 450, "protein": 35, "carbs": 25, "fat": 25}},
    ],
}


def fallback_meal_plan() -> Dict[str, Any]:
    return {"week": copy.deepcopy(_FALLBACK_WEEK)}


def fallback_recipes(meal_type: str) -> List[Dict[str, Any]]:
    recipes = copy.deepcopy(_FALLBACK_RECIPES.get((meal_type or "").lower(), []))
    for recipe in recipes:
        recipe["mealType"] = meal_type
    return recipes
