# -*- coding: utf-8 -*-
"""Food facts endpoint (barcode lookup)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path

from ..auth.security import get_current_user
from ..request_guard import LatestRequestGuard
from .client import (
    BarcodeLookup,
    FoodFactsClient,
    FoodFactsError,
    FoodFactsNotFoundError,
    StaleLookupError,
    get_food_facts_client,
)
from .models import ProductFacts

router = APIRouter(prefix="/api/food-facts", tags=["Food Facts"])

_guard = LatestRequestGuard()


@router.get("/{barcode}", response_model=ProductFacts, summary="Look up a product by barcode")
async def get_food_facts(
    barcode: str = Path(..., pattern=r"^\d{4,20}$"),
    user: dict = Depends(get_current_user),
    client: FoodFactsClient = Depends(get_food_facts_client),
):
    lookup = BarcodeLookup(client, guard=_guard)
    try:
        return await lookup.lookup(barcode, scope=f"barcode:{user['id']}", retain=False)
    except StaleLookupError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except FoodFactsNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except FoodFactsError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
