# -*- coding: utf-8 -*-
"""Recipe endpoints (search + detail)."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user
from .client import (
    RecipeClient,
    RecipeNotFoundError,
    RecipeQuotaError,
    RecipeServiceError,
    get_recipe_client,
)

router = APIRouter(prefix="/api/recipes", tags=["Recipes"])


def recipe_error_to_http(exc: RecipeServiceError) -> HTTPException:
    if isinstance(exc, RecipeNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, RecipeQuotaError):
        return HTTPException(status_code=429, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))


@router.get("/search", response_model=List[Dict[str, Any]], summary="Search recipes by meal type")
async def search_recipes(
    meal_type: str = Query(..., pattern="^(breakfast|lunch|dinner|snack)$"),
    q: str = Query(default="", max_length=200),
    number: int = Query(default=20, ge=1, le=100),
    user: dict = Depends(get_current_user),
    client: RecipeClient = Depends(get_recipe_client),
):
    return await client.search_recipes_by_meal_type(meal_type, q, number)


@router.get("/{recipe_id}", response_model=Dict[str, Any], summary="Get recipe details")
async def get_recipe(
    recipe_id: int,
    user: dict = Depends(get_current_user),
    client: RecipeClient = Depends(get_recipe_client),
):
    try:
        return await client.get_recipe_details(recipe_id)
    except RecipeServiceError as exc:
        raise recipe_error_to_http(exc) from exc
