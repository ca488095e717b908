# -*- coding: utf-8 -*-
"""Health data — glucose readings as JSON files, with a labelled synthetic fallback.

Layout: ``<data_root>/users/<user_id>/health/<sync_id>.json``, one file per sync.
"""

from __future__ import annotations

import json
import logging
import math
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from ..config import settings
from .models import GlucoseReading

logger = logging.getLogger(__name__)

SYNTHETIC_SOURCE = "Synthetic"
SYNTHETIC_VALUES = (95, 110, 125, 140, 155, 170, 85, 75)
TREND_THRESHOLD = 15.0
TREND_WINDOW = timedelta(hours=3)

_MESSAGES = {
    "low": "Blood sugar is low. Consider having a snack.",
    "normal": "Blood sugar is in normal range.",
    "high": "Blood sugar is elevated. Monitor closely.",
    "critical": "Blood sugar is very high. Consult your doctor.",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _data_root_for(user_id: str) -> Path:
    return settings.data_root / "users" / user_id / "health"


def classify_glucose_level(value: float) -> str:
    if value < 70:
        return "low"
    if value <= 140:
        return "normal"
    if value <= 180:
        return "high"
    return "critical"


def glucose_message(category: Optional[str]) -> str:
    return _MESSAGES.get(category or "normal", _MESSAGES["normal"])


def glucose_trend(readings: Sequence[GlucoseReading], now: Optional[datetime] = None) -> str:
    """Compare the two most recent readings of the last 3 hours."""
    current = _aware(now or _utc_now())
    recent = sorted(
        (r for r in readings if current - _aware(r.timestamp) <= TREND_WINDOW),
        key=lambda r: _aware(r.timestamp),
        reverse=True,
    )
    if len(recent) < 2:
        return "stable"
    diff = recent[0].value - recent[1].value
    if diff > TREND_THRESHOLD:
        return "rising"
    if diff < -TREND_THRESHOLD:
        return "falling"
    return "stable"


def save_readings(
    user_id: str,
    readings: Sequence[GlucoseReading],
    device_id: str = "default",
    data_root: Path | None = None,
) -> str:
    """Persist one sync of readings, returns sync_id."""
    sync_id = str(uuid4())
    root = data_root or _data_root_for(user_id)
    root.mkdir(parents=True, exist_ok=True)

    items: List[Dict[str, Any]] = []
    for reading in readings:
        data = reading.model_dump(mode="json")
        data["category"] = data.get("category") or classify_glucose_level(reading.value)
        items.append(data)

    record = {
        "sync_id": sync_id,
        "device_id": device_id,
        "synced_at": _utc_now().isoformat().replace("+00:00", "Z"),
        "readings": items,
    }
    (root / f"{sync_id}.json").write_text(json.dumps(record, ensure_ascii=False, indent=2), encoding="utf-8")
    return sync_id


def load_readings(user_id: str, data_root: Path | None = None) -> List[GlucoseReading]:
    """All stored readings, newest first."""
    root = data_root or _data_root_for(user_id)
    if not root.exists():
        return []

    readings: List[GlucoseReading] = []
    for fp in root.glob("*.json"):
        try:
            record = json.loads(fp.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Skipping unreadable health sync file %s", fp)
            continue
        for item in record.get("readings", []):
            try:
                readings.append(GlucoseReading.model_validate(item))
            except ValueError:
                continue
    readings.sort(key=lambda r: _aware(r.timestamp), reverse=True)
    return readings


def synthetic_reading(rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> GlucoseReading:
    value = float((rng or random).choice(SYNTHETIC_VALUES))
    return GlucoseReading(
        value=value,
        timestamp=now or _utc_now(),
        source=SYNTHETIC_SOURCE,
        category=classify_glucose_level(value),
        is_real_data=False,
    )


def synthetic_history(
    days: int,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> List[GlucoseReading]:
    """Four readings a day, six hours apart, newest first, clamped to 60-250 mg/dL."""
    r = rng or random
    current = now or _utc_now()
    history: List[GlucoseReading] = []
    for i in range(days * 4):
        base = 100 + math.sin(i * 0.5) * 30
        value = max(60, min(250, round(base + (r.random() - 0.5) * 40)))
        history.append(
            GlucoseReading(
                value=float(value),
                timestamp=current - timedelta(hours=6 * i),
                source=SYNTHETIC_SOURCE,
                category=classify_glucose_level(value),
                is_real_data=False,
            )
        )
    return history


def latest_reading(
    user_id: str,
    rng: Optional[random.Random] = None,
    data_root: Path | None = None,
) -> GlucoseReading:
    readings = load_readings(user_id, data_root=data_root)
    if readings:
        return readings[0]
    logger.info("No stored glucose readings for %s; serving synthetic reading", user_id)
    return synthetic_reading(rng)


def reading_history(
    user_id: str,
    days: int = 7,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
    data_root: Path | None = None,
) -> List[GlucoseReading]:
    current = _aware(now or _utc_now())
    cutoff = current - timedelta(days=days)
    readings = [r for r in load_readings(user_id, data_root=data_root) if _aware(r.timestamp) >= cutoff]
    if readings:
        return readings
    logger.info("No glucose history for %s; serving synthetic history", user_id)
    return synthetic_history(days, rng=rng, now=current)
