# -*- coding: utf-8 -*-
"""Patients — doctor/patient assignment storage helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException

from ..app_db import db_conn
from ..auth.storage import get_user_by_id, set_assigned_doctor
from ..config import settings
from ..plans.storage import get_current_week_plan, get_most_recent_plan

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 50


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _patient_summary(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "first_name": row.get("first_name") or "",
        "last_name": row.get("last_name") or "",
        "email": row.get("email") or "",
        "photo_url": row.get("photo_url"),
        "user_type": row.get("user_type") or "patient",
        "created_at": row.get("created_at"),
    }


def is_assigned(*, doctor_id: str, patient_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT 1 FROM doctor_patient_assignments WHERE doctor_id = ? AND patient_id = ?",
            (doctor_id, patient_id),
        ).fetchone()
    return row is not None


def ensure_patient_access(user: Dict[str, Any], patient_id: str) -> None:
    """A user may act on their own data; a doctor also on assigned patients' data."""
    if patient_id == user["id"]:
        return
    if (user.get("user_type") or "patient") != "doctor":
        raise HTTPException(status_code=403, detail="Only doctors can access other users' data")
    if not is_assigned(doctor_id=user["id"], patient_id=patient_id):
        raise HTTPException(status_code=403, detail="Patient not assigned to this doctor")


def assign_patient(*, doctor_id: str, patient_id: str) -> bool:
    """Assign `patient_id` to `doctor_id`; returns False when already assigned."""
    patient = get_user_by_id(patient_id)
    if not patient or (patient.get("user_type") or "patient") != "patient":
        raise HTTPException(status_code=404, detail="Patient not found")
    if is_assigned(doctor_id=doctor_id, patient_id=patient_id):
        return False
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO doctor_patient_assignments (id, doctor_id, patient_id, assigned_at, is_active)
            VALUES (?, ?, ?, ?, 1)
            """,
            (str(uuid4()), doctor_id, patient_id, _utc_now()),
        )
    set_assigned_doctor(patient_id=patient_id, doctor_id=doctor_id)
    logger.info("Assigned patient %s to doctor %s", patient_id, doctor_id)
    return True


def remove_patient_assignment(*, doctor_id: str, patient_id: str) -> bool:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute(
            "DELETE FROM doctor_patient_assignments WHERE doctor_id = ? AND patient_id = ?",
            (doctor_id, patient_id),
        )
        removed = cur.rowcount > 0
    patient = get_user_by_id(patient_id)
    if removed and patient and patient.get("assigned_doctor_id") == doctor_id:
        set_assigned_doctor(patient_id=patient_id, doctor_id=None)
    return removed


def list_assigned_patients(doctor_id: str) -> List[Dict[str, Any]]:
    doctor = get_user_by_id(doctor_id)
    if not doctor or doctor.get("user_type") != "doctor":
        return []
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT u.* FROM doctor_patient_assignments a
            JOIN users u ON u.id = a.patient_id
            WHERE a.doctor_id = ?
            ORDER BY a.assigned_at ASC
            """,
            (doctor_id,),
        ).fetchall()

    patients: List[Dict[str, Any]] = []
    for row in rows:
        data = dict(row)
        plan = get_most_recent_plan(data["id"])
        item = _patient_summary(data)
        item["assigned_doctor_id"] = data.get("assigned_doctor_id")
        item["current_meal_plan_id"] = plan["id"] if plan else None
        patients.append(item)
    return patients


def _relevance_key(patient: Dict[str, Any], term: str):
    full_name = f"{patient['first_name']} {patient['last_name']}".lower()
    email = (patient.get("email") or "").lower()
    return (
        full_name != term,
        email != term,
        not full_name.startswith(term),
        full_name,
    )


def search_patients(term: str) -> List[Dict[str, Any]]:
    """Substring search over patient names/emails, most relevant first."""
    search = (term or "").strip().lower()
    if len(search) < MIN_SEARCH_LENGTH:
        return []
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM users WHERE user_type = 'patient' LIMIT ?",
            (SEARCH_LIMIT,),
        ).fetchall()

    matches: List[Dict[str, Any]] = []
    for row in rows:
        data = dict(row)
        first = (data.get("first_name") or "").lower()
        last = (data.get("last_name") or "").lower()
        email = (data.get("email") or "").lower()
        full_name = f"{first} {last}".strip()
        if search in first or search in last or search in full_name or search in email:
            matches.append(_patient_summary(data))
    matches.sort(key=lambda p: _relevance_key(p, search))
    return matches


def get_patient_for_doctor(*, doctor_id: str, patient_id: str) -> Dict[str, Any]:
    if not is_assigned(doctor_id=doctor_id, patient_id=patient_id):
        raise HTTPException(status_code=403, detail="Patient not assigned to this doctor")
    patient = get_user_by_id(patient_id)
    if not patient:
        raise HTTPException(status_code=404, detail="Patient not found")
    item = _patient_summary(patient)
    item["assigned_doctor_id"] = patient.get("assigned_doctor_id")
    item["current_meal_plan_id"] = patient.get("current_meal_plan_id")
    return item


def get_patient_doctor(patient: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if (patient.get("user_type") or "patient") != "patient" or not patient.get("assigned_doctor_id"):
        return None
    doctor = get_user_by_id(patient["assigned_doctor_id"])
    if not doctor:
        return None
    return {
        "id": doctor["id"],
        "first_name": doctor.get("first_name") or "",
        "last_name": doctor.get("last_name") or "",
        "email": doctor.get("email") or "",
        "specialization": doctor.get("specialization") or "General Practice",
    }


def doctor_statistics(doctor_id: str) -> Dict[str, int]:
    patients = list_assigned_patients(doctor_id)
    active = sum(1 for p in patients if get_current_week_plan(p["id"]))
    return {
        "total_patients": len(patients),
        "active_meal_plans": active,
        "patients_without_plans": len(patients) - active,
    }
