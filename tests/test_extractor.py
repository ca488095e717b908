# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from dietitian.meals.extractor import (
    coerce_float,
    extract_calories,
    fallback_calories,
    misfiled_ready_time_calories,
    nutrient_amount,
)


class TestExtractCalories(unittest.TestCase):
    def test_direct_calories_win(self) -> None:
        meal = {"calories": 520, "nutrition": {"calories": 100}}
        self.assertEqual(extract_calories(meal, "lunch"), 520.0)

    def test_zero_direct_falls_through_to_nested(self) -> None:
        meal = {"calories": "0", "nutrition": {"calories": 410}}
        self.assertEqual(extract_calories(meal, "lunch"), 410.0)

    def test_nutrients_entry_matched_by_name(self) -> None:
        meal = {
            "nutrition": {
                "nutrients": [
                    {"name": "Fat", "amount": 10},
                    {"name": "Calories", "amount": "612.5"},
                ]
            }
        }
        self.assertEqual(extract_calories(meal, "dinner"), 612.5)

    def test_unparseable_nutrient_continues_to_ready_time(self) -> None:
        meal = {
            "readyInMinutes": 450,
            "nutrition": {"nutrients": [{"name": "Calories", "amount": "n/a"}]},
        }
        self.assertEqual(extract_calories(meal, "dinner"), 450.0)

    def test_ready_time_used_when_calories_is_falsy(self) -> None:
        for calories in (0, None, ""):
            with self.subTest(calories=calories):
                meal = {"calories": calories, "readyInMinutes": 450}
                self.assertEqual(misfiled_ready_time_calories(meal), 450.0)
                self.assertEqual(extract_calories(meal, "dinner"), 450.0)

    def test_generated_plan_meal_with_zero_calories(self) -> None:
        meal = {"id": 9, "title": "Stew", "image": "stew.jpg", "calories": 0, "readyInMinutes": 520}
        self.assertEqual(extract_calories(meal, "lunch"), 520.0)

    def test_nutrient_matched_by_title_when_name_missing(self) -> None:
        meal = {"nutrition": {"nutrients": [{"title": "Protein", "amount": 30}, {"title": "Calories", "amount": 610}]}}
        self.assertEqual(extract_calories(meal, "dinner"), 610.0)

    def test_short_ready_time_uses_meal_type_fallback(self) -> None:
        self.assertEqual(extract_calories({"readyInMinutes": 45}, "lunch"), 500.0)
        self.assertEqual(extract_calories({}, "Breakfast"), 350.0)
        self.assertEqual(extract_calories({}, "snack"), 400.0)
        self.assertEqual(extract_calories({}), 400.0)

    def test_non_mapping_meal_never_raises(self) -> None:
        self.assertEqual(extract_calories(None), 400.0)
        self.assertEqual(extract_calories("pizza", "lunch"), 500.0)
        self.assertEqual(extract_calories(["x"], "dinner"), 600.0)


class TestExtractorHelpers(unittest.TestCase):
    def test_coerce_float(self) -> None:
        self.assertEqual(coerce_float("1,250 kcal"), 1250.0)
        self.assertEqual(coerce_float(3), 3.0)
        self.assertIsNone(coerce_float(True))
        self.assertIsNone(coerce_float(""))
        self.assertIsNone(coerce_float({"a": 1}))

    def test_fallback_calories_case_insensitive(self) -> None:
        self.assertEqual(fallback_calories(" DINNER "), 600.0)
        self.assertEqual(fallback_calories(None), 400.0)

    def test_nutrient_amount_exact_name(self) -> None:
        recipe = {
            "nutrition": {
                "nutrients": [
                    {"name": "Calories", "amount": 300},
                    {"name": "Protein", "amount": "12.5"},
                ]
            }
        }
        self.assertEqual(nutrient_amount(recipe, "protein"), 12.5)
        self.assertEqual(nutrient_amount(recipe, "Calorie"), 0.0)
        self.assertEqual(nutrient_amount(recipe, "Fat", default=-1.0), -1.0)
        self.assertEqual(nutrient_amount(None, "Protein"), 0.0)


if __name__ == "__main__":
    unittest.main()
