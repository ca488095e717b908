# -*- coding: utf-8 -*-
"""Auth — Pydantic models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


UserType = Literal["doctor", "patient"]


class UserPublic(BaseModel):
    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    user_type: UserType = "patient"
    photo_url: Optional[str] = None
    assigned_doctor_id: Optional[str] = None
    current_meal_plan_id: Optional[str] = None
    created_at: str


class UserUpsertRequest(BaseModel):
    """Profile as mirrored from the identity provider."""

    id: str = Field(..., min_length=1)
    email: str = Field("", max_length=254)
    first_name: str = Field("", max_length=128)
    last_name: str = Field("", max_length=128)
    user_type: UserType = "patient"
    photo_url: Optional[str] = None
    specialization: Optional[str] = None
    assigned_doctor_id: Optional[str] = None
