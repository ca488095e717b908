# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from .models import UserPublic
from .security import get_current_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def user_public(row: dict) -> UserPublic:
    return UserPublic(
        id=row["id"],
        email=row.get("email") or "",
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        user_type=row.get("user_type") or "patient",
        photo_url=row.get("photo_url"),
        assigned_doctor_id=row.get("assigned_doctor_id"),
        current_meal_plan_id=row.get("current_meal_plan_id"),
        created_at=row.get("created_at") or "",
    )


@router.get("/me", response_model=UserPublic, summary="Get current user")
def me(user: dict = Depends(get_current_user)):
    return user_public(user)
