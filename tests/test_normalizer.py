# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from dietitian.plans.normalizer import (
    ArrayDay,
    NamedDay,
    canonical_plan,
    detect_plan_type,
    iter_meals,
    normalize_day,
    normalize_week,
    parse_day,
    resolve_week,
)


B = {"id": 1, "title": "Oats"}
L = {"id": 2, "title": "Salad"}
D = {"id": 3, "title": "Salmon"}


class TestDayShapes(unittest.TestCase):
    def test_array_day_becomes_named(self) -> None:
        nutrients = {"calories": 1800}
        day = normalize_day({"meals": [B, L, D], "nutrients": nutrients})
        self.assertEqual(day, {"breakfast": B, "lunch": L, "dinner": D, "nutrients": nutrients})

    def test_short_array_leaves_missing_slots_empty(self) -> None:
        day = normalize_day({"meals": [B, L]})
        self.assertEqual(day["dinner"], None)
        self.assertIsNone(day["nutrients"])

    def test_named_day_keeps_extra_fields(self) -> None:
        raw = {"breakfast": B, "dinner": D, "notes": "low salt"}
        day = normalize_day(raw)
        self.assertEqual(day["breakfast"], B)
        self.assertIsNone(day["lunch"])
        self.assertEqual(day["notes"], "low salt")

    def test_meals_list_wins_over_named_keys(self) -> None:
        parsed = parse_day({"meals": [B], "lunch": L})
        self.assertIsInstance(parsed, ArrayDay)
        self.assertIsInstance(parse_day({"lunch": L}), NamedDay)

    def test_unrecognized_shapes(self) -> None:
        self.assertIsNone(parse_day(None))
        self.assertIsNone(parse_day([B, L, D]))
        self.assertIsNone(parse_day({"nutrients": {}}))


class TestWeek(unittest.TestCase):
    def test_normalizing_twice_changes_nothing(self) -> None:
        weeks = {
            "array": {"monday": {"meals": [B, L, D], "nutrients": {"calories": 1800, "protein": 90}}},
            "named": {"tuesday": {"breakfast": B, "dinner": D, "notes": "low salt", "nutrients": {"calories": 1500}}},
        }
        for shape, raw in weeks.items():
            with self.subTest(shape=shape):
                once = normalize_week(raw)
                self.assertEqual(normalize_week(once), once)


    def test_unrecognized_day_is_logged_and_skipped(self) -> None:
        raw = {"monday": {"meals": [B, L, D]}, "tuesday": "garbage"}
        with self.assertLogs("dietitian.plans.normalizer", level="WARNING") as logs:
            week = normalize_week(raw)
        self.assertEqual(list(week.keys()), ["monday"])
        self.assertIn("tuesday", logs.output[0])

    def test_non_mapping_week(self) -> None:
        self.assertEqual(normalize_week(None), {})
        self.assertEqual(normalize_week([1, 2]), {})

    def test_detect_plan_type(self) -> None:
        self.assertEqual(detect_plan_type({"type": "manual"}), "manual")
        self.assertEqual(detect_plan_type({"planType": "manual"}), "manual")
        self.assertEqual(detect_plan_type({"id": "p1_manual_2024-03-01_1709251200000"}), "manual")
        self.assertEqual(detect_plan_type({"id": "p1_2024-03-01"}), "ai")
        self.assertEqual(detect_plan_type(None), "ai")

    def test_resolve_week_order(self) -> None:
        top = {"monday": {"meals": [B]}}
        nested = {"tuesday": {"meals": [L]}}
        self.assertEqual(resolve_week({"week": top, "mealPlan": {"week": nested}}), top)
        self.assertEqual(resolve_week({"mealPlan": {"week": nested}}), nested)
        self.assertIsNone(resolve_week({"monday": {"breakfast": B}}))

    def test_manual_document_days_at_top_level(self) -> None:
        doc = {
            "id": "p1_manual_2024-03-01_1",
            "type": "manual",
            "status": "active",
            "Monday": {"breakfast": B, "lunch": L, "dinner": D},
        }
        self.assertEqual(resolve_week(doc), {"Monday": doc["Monday"]})

    def test_canonical_plan_and_iter_meals(self) -> None:
        doc = {
            "id": "p1_2024-03-01",
            "mealPlan": {"week": {"monday": {"meals": [B, L, D], "nutrients": {"calories": 1500}}}},
        }
        plan = canonical_plan(doc)
        self.assertEqual(plan["plan_id"], "p1_2024-03-01")
        self.assertEqual(plan["plan_type"], "ai")
        meals = list(iter_meals(plan["week"]))
        self.assertEqual(
            meals,
            [("monday", "breakfast", B), ("monday", "lunch", L), ("monday", "dinner", D)],
        )


if __name__ == "__main__":
    unittest.main()
