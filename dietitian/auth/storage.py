# -*- coding: utf-8 -*-
"""Auth — user profile storage helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..app_db import db_conn
from ..config import settings
from .models import UserUpsertRequest


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return dict(row) if row else None


def upsert_user(profile: UserUpsertRequest) -> Dict[str, Any]:
    """Insert or refresh a profile mirrored from the identity provider.

    Plan bookkeeping columns (`current_meal_plan_id`, ...) are left untouched on update.
    """
    existing = get_user_by_id(profile.id)
    with db_conn(settings.app_db_path) as conn:
        if existing:
            conn.execute(
                """
                UPDATE users SET email = ?, first_name = ?, last_name = ?, user_type = ?,
                    photo_url = ?, specialization = ?, assigned_doctor_id = ?
                WHERE id = ?
                """,
                (
                    profile.email.lower().strip(),
                    profile.first_name,
                    profile.last_name,
                    profile.user_type,
                    profile.photo_url,
                    profile.specialization,
                    profile.assigned_doctor_id,
                    profile.id,
                ),
            )
        else:
            conn.execute(
                """
                INSERT INTO users (
                    id, email, first_name, last_name, user_type, photo_url, specialization,
                    assigned_doctor_id, current_meal_plan_id, last_meal_plan_update, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, NULL, NULL, ?)
                """,
                (
                    profile.id,
                    profile.email.lower().strip(),
                    profile.first_name,
                    profile.last_name,
                    profile.user_type,
                    profile.photo_url,
                    profile.specialization,
                    profile.assigned_doctor_id,
                    _utc_now(),
                ),
            )
    row = get_user_by_id(profile.id)
    assert row is not None
    return row


def set_current_meal_plan(*, user_id: str, plan_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            "UPDATE users SET current_meal_plan_id = ?, last_meal_plan_update = ? WHERE id = ?",
            (plan_id, _utc_now(), user_id),
        )


def set_assigned_doctor(*, patient_id: str, doctor_id: Optional[str]) -> None:
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            "UPDATE users SET assigned_doctor_id = ? WHERE id = ?",
            (doctor_id, patient_id),
        )
