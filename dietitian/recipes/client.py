# -*- coding: utf-8 -*-
"""Recipe source client (Spoonacular-compatible REST API)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..config import settings
from ..meals.extractor import nutrient_amount
from .fallbacks import fallback_meal_plan, fallback_recipes

logger = logging.getLogger(__name__)

IMAGE_BASE_URL = "https://spoonacular.com/recipeImages/"
PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x200?text=No+Image"
DEFAULT_TARGET_CALORIES = 2000

_DIET_MAP = {
    "diabetic": "diabetic",
    "ketogenic": "keto",
    "vegan": "vegan",
    "vegetarian": "vegetarian",
    "paleo": "paleo",
    "whole30": "whole30",
    "gluten-free": "gluten free",
}


class RecipeServiceError(Exception):
    """The recipe source could not serve the request; retry later."""


class RecipeNotFoundError(RecipeServiceError):
    pass


class RecipeQuotaError(RecipeServiceError):
    pass


def map_diet(diet: Optional[str]) -> str:
    return _DIET_MAP.get((diet or "").strip().lower(), "")


def format_meal_plan_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    formatted: Dict[str, Any] = {
        "timeFrame": params.get("timeFrame") or "week",
        "targetCalories": params.get("targetCalories") or DEFAULT_TARGET_CALORIES,
    }
    diet = map_diet(params.get("diet"))
    if diet:
        formatted["diet"] = diet
    if params.get("exclude"):
        formatted["exclude"] = params["exclude"]
    if params.get("randomSeed"):
        formatted["offset"] = int(params["randomSeed"]) % 100
    return formatted


def full_image_url(image: Any) -> str:
    if not image or not isinstance(image, str):
        return PLACEHOLDER_IMAGE
    if image.startswith("http"):
        return image
    return f"{IMAGE_BASE_URL}{image}"


def format_recipe_summary(recipe: Mapping[str, Any], meal_type: str) -> Dict[str, Any]:
    calories = nutrient_amount(recipe, "Calories")
    return {
        "id": recipe.get("id"),
        "name": recipe.get("title"),
        "image": full_image_url(recipe.get("image")),
        "calories": calories,
        "prepTime": recipe.get("readyInMinutes") or 0,
        "ingredients": recipe.get("extendedIngredients") or [],
        "instructions": recipe.get("analyzedInstructions") or [],
        "nutrition": {
            "calories": calories,
            "protein": nutrient_amount(recipe, "Protein"),
            "carbs": nutrient_amount(recipe, "Carbohydrates"),
            "fat": nutrient_amount(recipe, "Fat"),
        },
        "mealType": meal_type,
        "difficulty": "Easy",
        "servings": recipe.get("servings") or 1,
    }


class RecipeClient:
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.recipe_api_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.recipe_api_key
        self.timeout = timeout if timeout is not None else settings.recipe_api_timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        params = {"apiKey": self.api_key} if self.api_key else None
        return httpx.AsyncClient(
            base_url=self.base_url,
            params=params,
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        async with self._client() as client:
            resp = await client.get(path, params=params)
            resp.raise_for_status()
            return resp.json()

    async def get_recipe_details(self, recipe_id: Any, include_nutrition: bool = True) -> Dict[str, Any]:
        params = {
            "includeNutrition": str(bool(include_nutrition)).lower(),
            "addWinePairing": "false",
            "addTasteData": "false",
        }
        try:
            recipe = await self._get(f"/recipes/{recipe_id}/information", params)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Recipe %s lookup failed with HTTP %s", recipe_id, status)
            if status == 404:
                raise RecipeNotFoundError("Recipe not found") from exc
            if status == 402:
                raise RecipeQuotaError("API quota exceeded. Please try again later.") from exc
            raise RecipeServiceError("Failed to load recipe details. Please try again.") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Recipe %s lookup failed: %s", recipe_id, exc)
            raise RecipeServiceError("Failed to load recipe details. Please try again.") from exc

        if not isinstance(recipe, dict):
            raise RecipeServiceError("Failed to load recipe details. Please try again.")
        if recipe.get("image"):
            recipe["image"] = full_image_url(recipe["image"])
        return recipe

    async def generate_meal_plan(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Weekly (array-shaped) plan; falls back to the bundled plan when the source fails."""
        try:
            plan = await self._get("/mealplanner/generate", format_meal_plan_params(params))
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Meal plan generation failed, serving fallback plan: %s", exc)
            return fallback_meal_plan()
        if not isinstance(plan, dict):
            logger.warning("Meal plan generation returned %s, serving fallback plan", type(plan).__name__)
            return fallback_meal_plan()

        week = plan.get("week")
        if isinstance(week, dict):
            for day in week.values():
                if not isinstance(day, dict) or not isinstance(day.get("meals"), list):
                    continue
                day["meals"] = [
                    {**meal, "image": full_image_url(meal.get("image")), "calories": meal.get("calories") or 0}
                    for meal in day["meals"]
                    if isinstance(meal, dict)
                ]
        return plan

    async def find_alternative_recipes(self, current_meal: Mapping[str, Any], meal_type: str) -> List[Dict[str, Any]]:
        params = {
            "type": meal_type,
            "number": 5,
            "addRecipeInformation": "true",
            "fillIngredients": "true",
            "excludeIngredients": current_meal.get("title") or "",
        }
        try:
            data = await self._get("/recipes/complexSearch", params)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Alternative recipe search failed: %s", exc)
            return []
        results = data.get("results") if isinstance(data, dict) else None
        return [
            {**recipe, "image": full_image_url(recipe.get("image"))}
            for recipe in results or []
            if isinstance(recipe, dict)
        ]

    async def search_recipes_by_meal_type(
        self,
        meal_type: str,
        search_term: str = "",
        number: int = 20,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "type": meal_type,
            "number": number,
            "addRecipeInformation": "true",
            "fillIngredients": "true",
            "addRecipeNutrition": "true",
        }
        if search_term.strip():
            params["query"] = search_term.strip()
        try:
            data = await self._get("/recipes/complexSearch", params)
        except (httpx.HTTPError, ValueError) as exc:
            logger.info("Recipe search failed, serving fallback recipes: %s", exc)
            return fallback_recipes(meal_type)
        results = data.get("results") if isinstance(data, dict) else None
        return [format_recipe_summary(r, meal_type) for r in results or [] if isinstance(r, dict)]


def get_recipe_client() -> RecipeClient:
    return RecipeClient()
