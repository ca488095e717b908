# -*- coding: utf-8 -*-
"""Meal logs — DB storage helpers + statistics."""

from __future__ import annotations

import json
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from fastapi import HTTPException

from ..app_db import db_conn
from ..config import settings
from ..meals.extractor import extract_calories

COUNTED_MEAL_TYPES = ("breakfast", "lunch", "dinner")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _as_date(value: date | str | None) -> date:
    if value is None:
        return _today()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def meal_snapshot(meal: Mapping[str, Any], meal_type: Optional[str]) -> Dict[str, Any]:
    return {
        "id": meal.get("id"),
        "title": meal.get("title") or meal.get("name"),
        "image": meal.get("image"),
        "calories": extract_calories(meal, meal_type),
        "prepTime": meal.get("readyInMinutes") or meal.get("prepTime"),
        "servings": meal.get("servings") or 1,
    }


def _row_to_log(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "user_id": row["user_id"],
        "meal_type": row["meal_type"],
        "meal_data": json.loads(row["meal_json"] or "{}"),
        "photo_uri": row["photo_uri"],
        "date": row["date"],
        "logged_at": row["logged_at"],
        "device_timestamp": row["device_timestamp"],
        "logged_from": row["logged_from"],
        "status": row["status"],
    }


def save_meal_log(
    *,
    user_id: str,
    meal_type: str,
    meal: Mapping[str, Any],
    photo_uri: Optional[str] = None,
    device_timestamp: Optional[str] = None,
    today: date | str | None = None,
) -> Dict[str, Any]:
    log = {
        "id": str(uuid4()),
        "user_id": user_id,
        "meal_type": meal_type,
        "meal_data": meal_snapshot(meal, meal_type),
        "photo_uri": photo_uri,
        "date": _as_date(today).isoformat(),
        "logged_at": _utc_now(),
        "device_timestamp": device_timestamp,
        "logged_from": "mobile_app",
        "status": "logged",
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO meal_logs (
                id, user_id, meal_type, meal_json, photo_uri, date, logged_at,
                device_timestamp, logged_from, status
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                log["id"],
                user_id,
                meal_type,
                json.dumps(log["meal_data"], ensure_ascii=False),
                photo_uri,
                log["date"],
                log["logged_at"],
                device_timestamp,
                log["logged_from"],
                log["status"],
            ),
        )
    return log


def list_meal_logs(user_id: str, limit: int = 50, day: Optional[str] = None) -> List[Dict[str, Any]]:
    sql = "SELECT * FROM meal_logs WHERE user_id = ?"
    params: list[Any] = [user_id]
    if day:
        sql += " AND date = ?"
        params.append(day)
    sql += " ORDER BY logged_at DESC LIMIT ?"
    params.append(int(limit))
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(sql, tuple(params)).fetchall()
        return [_row_to_log(r) for r in rows]


def filter_meal_logs(
    user_id: str,
    *,
    meal_type: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    sql = "SELECT * FROM meal_logs WHERE user_id = ?"
    params: list[Any] = [user_id]
    if meal_type:
        sql += " AND meal_type = ?"
        params.append(meal_type)
    sql += " ORDER BY logged_at DESC LIMIT ?"
    params.append(int(limit))
    with db_conn(settings.app_db_path) as conn:
        logs = [_row_to_log(r) for r in conn.execute(sql, tuple(params)).fetchall()]
    # Date range applies to the newest `limit` logs only.
    if start:
        logs = [log for log in logs if log["date"] >= start]
    if end:
        logs = [log for log in logs if log["date"] <= end]
    return logs


def meal_log_statistics(user_id: str, days: int = 7, today: date | str | None = None) -> Dict[str, Any]:
    end_date = _as_date(today)
    start_date = end_date - timedelta(days=days)
    start, end = start_date.isoformat(), end_date.isoformat()

    recent = list_meal_logs(user_id, limit=days * 5)
    in_range = [log for log in recent if start <= log["date"] <= end]

    counts = {meal_type: 0 for meal_type in COUNTED_MEAL_TYPES}
    total_calories = 0.0
    for log in in_range:
        if log["meal_type"] in counts:
            counts[log["meal_type"]] += 1
        total_calories += float((log.get("meal_data") or {}).get("calories") or 0)

    total = len(in_range)
    return {
        "total_logs": total,
        "average_per_day": round(total / days, 1) if days else 0.0,
        "total_calories": total_calories,
        "average_calories_per_day": round(total_calories / days, 1) if days else 0.0,
        "meal_type_counts": counts,
        "days_analyzed": days,
        "date_range": {"start": start, "end": end},
        "target_user_id": user_id,
    }


def patient_meal_summary(patient_id: str, days: int = 30, today: date | str | None = None) -> Dict[str, Any]:
    day = _as_date(today)
    recent = list_meal_logs(patient_id, limit=10)
    todays = list_meal_logs(patient_id, day=day.isoformat())
    statistics = meal_log_statistics(patient_id, days=days, today=day)
    return {
        "patient_id": patient_id,
        "recent_logs_count": len(recent),
        "todays_logs_count": len(todays),
        "statistics": statistics,
        "last_logged_date": recent[0]["date"] if recent else None,
        "has_recent_activity": bool(recent),
        "average_daily_logs": statistics["average_per_day"],
        "total_calories": statistics["total_calories"],
        "generated_at": _utc_now(),
    }


def get_meal_log(log_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM meal_logs WHERE id = ?", (log_id,)).fetchone()
        return _row_to_log(row) if row else None


def delete_meal_log(log_id: str) -> None:
    if not get_meal_log(log_id):
        raise HTTPException(status_code=404, detail="Meal log not found")
    with db_conn(settings.app_db_path) as conn:
        conn.execute("DELETE FROM meal_logs WHERE id = ?", (log_id,))
