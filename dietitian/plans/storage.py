# -*- coding: utf-8 -*-
"""Meal plan storage helpers (SQLite, whole JSON documents).

Writes are last-write-wins: a doctor and a patient regenerating the same
weekly plan simply overwrite each other's document.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException

from ..app_db import db_conn
from ..auth.storage import set_current_meal_plan
from ..config import settings
from .aggregator import daily_average
from .models import NutrientTotals
from .normalizer import detect_plan_type

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _as_date(value: date | str | None) -> date:
    if value is None:
        return _today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def week_start(day: date | str | None = None) -> str:
    """ISO date of the Sunday on or before `day`."""
    d = _as_date(day)
    return (d - timedelta(days=(d.weekday() + 1) % 7)).isoformat()


def _row_to_doc(row: Mapping[str, Any]) -> Dict[str, Any]:
    try:
        doc = json.loads(row["payload_json"] or "{}")
    except json.JSONDecodeError:
        logger.error("Corrupt meal plan document %s", row["id"])
        doc = {}
    if not isinstance(doc, dict):
        doc = {}
    doc["id"] = row["id"]
    return doc


def _write_doc(doc: Dict[str, Any]) -> None:
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT OR REPLACE INTO meal_plans (
                id, patient_id, doctor_id, plan_type, status, payload_json, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                doc["id"],
                doc.get("patientId"),
                doc.get("doctorId"),
                detect_plan_type(doc),
                doc.get("status") or "active",
                json.dumps(doc, ensure_ascii=False),
                doc.get("createdAt") or _utc_now(),
                doc.get("updatedAt") or _utc_now(),
            ),
        )


def save_ai_plan(
    *,
    owner_id: str,
    plan: Dict[str, Any],
    created_by: str,
    doctor_id: Optional[str] = None,
    patient_id: Optional[str] = None,
    today: date | str | None = None,
) -> Dict[str, Any]:
    """Store a recipe-source plan under ``{patient}_{YYYY-MM-DD}``."""
    is_doctor = created_by == "doctor"
    day = _as_date(today)
    now = _utc_now()
    target = patient_id if (is_doctor and patient_id) else owner_id
    plan_id = f"{target}_{day.isoformat()}"

    doc: Dict[str, Any] = {
        "id": plan_id,
        "mealPlan": plan,
        "createdAt": now,
        "updatedAt": now,
        "doctorId": doctor_id or (owner_id if is_doctor else None),
        "patientId": patient_id or (None if is_doctor else owner_id),
        "status": "active",
        "medicalNotes": "",
        "approvedAt": now if is_doctor else None,
        "approvedBy": owner_id if is_doctor else None,
        "createdBy": created_by,
        "planType": "ai",
        "weekStart": week_start(day),
    }
    _write_doc(doc)
    logger.info("Saved AI meal plan %s", plan_id)
    return doc


def create_manual_plan(
    *,
    doctor_id: str,
    patient_id: str,
    duration: int,
    week: Dict[str, Any],
    total_nutrition: NutrientTotals,
    today: date | str | None = None,
    now_ms: Optional[int] = None,
) -> Dict[str, Any]:
    day = _as_date(today)
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    plan_id = f"{patient_id}_manual_{day.isoformat()}_{stamp}"
    now = _utc_now()

    doc: Dict[str, Any] = {
        "id": plan_id,
        "patientId": patient_id,
        "doctorId": doctor_id,
        "type": "manual",
        "duration": duration,
        "startDate": day.isoformat(),
        "endDate": (day + timedelta(days=duration)).isoformat(),
        "week": week,
        "createdAt": now,
        "updatedAt": now,
        "createdBy": "doctor",
        "approvedAt": now,
        "approvedBy": doctor_id,
        "status": "active",
        "totalNutrition": total_nutrition.model_dump(),
        "dailyAverageNutrition": daily_average(total_nutrition, duration).model_dump(),
        "planType": "manual",
        "mealCount": duration * 3,
    }
    _write_doc(doc)
    set_current_meal_plan(user_id=patient_id, plan_id=plan_id)
    logger.info("Created manual meal plan %s for patient %s", plan_id, patient_id)
    return doc


def get_plan(plan_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM meal_plans WHERE id = ?", (plan_id,)).fetchone()
    return _row_to_doc(row) if row else None


def require_plan(plan_id: str) -> Dict[str, Any]:
    doc = get_plan(plan_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Meal plan not found")
    return doc


def update_plan(plan_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
    doc = require_plan(plan_id)
    doc.update(updates)
    doc["id"] = plan_id
    doc["updatedAt"] = _utc_now()
    _write_doc(doc)
    return doc


def get_most_recent_plan(patient_id: str) -> Optional[Dict[str, Any]]:
    if not patient_id:
        return None
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            """
            SELECT * FROM meal_plans
            WHERE patient_id = ? AND status = 'active'
            ORDER BY created_at DESC
            LIMIT 1
            """,
            (patient_id,),
        ).fetchone()
    return _row_to_doc(row) if row else None


def get_current_week_plan(patient_id: str, today: date | str | None = None) -> Optional[Dict[str, Any]]:
    """Most recent active plan, else the weekly plan stored under today's id."""
    recent = get_most_recent_plan(patient_id)
    if recent:
        return recent
    return get_plan(f"{patient_id}_{_as_date(today).isoformat()}")
