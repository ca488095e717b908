# -*- coding: utf-8 -*-

from __future__ import annotations

import random
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from dietitian.health.models import GlucoseReading
from dietitian.health.storage import (
    SYNTHETIC_VALUES,
    classify_glucose_level,
    glucose_message,
    glucose_trend,
    latest_reading,
    load_readings,
    reading_history,
    save_readings,
)


NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _reading(value: float, minutes_ago: float) -> GlucoseReading:
    return GlucoseReading(value=value, timestamp=NOW - timedelta(minutes=minutes_ago))


class TestGlucoseRules(unittest.TestCase):
    def test_classify_boundaries(self) -> None:
        cases = {69: "low", 70: "normal", 140: "normal", 141: "high", 180: "high", 181: "critical"}
        for value, expected in cases.items():
            with self.subTest(value=value):
                self.assertEqual(classify_glucose_level(value), expected)

    def test_messages(self) -> None:
        self.assertEqual(glucose_message("low"), "Blood sugar is low. Consider having a snack.")
        self.assertEqual(glucose_message("critical"), "Blood sugar is very high. Consult your doctor.")
        self.assertEqual(glucose_message(None), "Blood sugar is in normal range.")

    def test_trend(self) -> None:
        self.assertEqual(glucose_trend([_reading(160, 10), _reading(140, 40)], now=NOW), "rising")
        self.assertEqual(glucose_trend([_reading(120, 10), _reading(140, 40)], now=NOW), "falling")
        self.assertEqual(glucose_trend([_reading(150, 10), _reading(140, 40)], now=NOW), "stable")
        # Readings older than three hours do not count.
        self.assertEqual(glucose_trend([_reading(200, 10), _reading(100, 240)], now=NOW), "stable")
        self.assertEqual(glucose_trend([], now=NOW), "stable")


class TestGlucoseStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="dietitian-health-"))

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_save_and_load_newest_first(self) -> None:
        save_readings("u1", [_reading(90, 60)], data_root=self._tmp)
        save_readings("u1", [_reading(190, 5), _reading(65, 120)], data_root=self._tmp)
        self.assertEqual(len(list(self._tmp.glob("*.json"))), 2)

        readings = load_readings("u1", data_root=self._tmp)
        self.assertEqual([r.value for r in readings], [190.0, 90.0, 65.0])
        self.assertEqual([r.category for r in readings], ["critical", "normal", "low"])
        self.assertTrue(all(r.is_real_data for r in readings))

        latest = latest_reading("u1", data_root=self._tmp)
        self.assertEqual(latest.value, 190.0)

    def test_latest_reading_is_labelled_synthetic_without_data(self) -> None:
        with self.assertLogs("dietitian.health.storage", level="INFO"):
            reading = latest_reading("nobody", rng=random.Random(3), data_root=self._tmp / "missing")
        self.assertEqual(reading.source, "Synthetic")
        self.assertFalse(reading.is_real_data)
        self.assertIn(reading.value, [float(v) for v in SYNTHETIC_VALUES])
        self.assertEqual(reading.category, classify_glucose_level(reading.value))

    def test_synthetic_history_shape(self) -> None:
        history = reading_history("nobody", days=2, rng=random.Random(11), now=NOW, data_root=self._tmp)
        self.assertEqual(len(history), 8)
        self.assertEqual(history[0].timestamp, NOW)
        self.assertEqual(history[1].timestamp, NOW - timedelta(hours=6))
        self.assertTrue(all(60 <= r.value <= 250 for r in history))
        self.assertTrue(all(r.source == "Synthetic" and not r.is_real_data for r in history))

    def test_history_prefers_stored_readings_in_window(self) -> None:
        save_readings("u1", [_reading(110, 60), _reading(150, 60 * 24 * 10)], data_root=self._tmp)
        history = reading_history("u1", days=7, now=NOW, data_root=self._tmp)
        self.assertEqual([r.value for r in history], [110.0])


if __name__ == "__main__":
    unittest.main()
