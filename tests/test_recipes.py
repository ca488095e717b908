# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import unittest

import httpx

from dietitian.recipes.client import (
    PLACEHOLDER_IMAGE,
    RecipeClient,
    RecipeNotFoundError,
    RecipeQuotaError,
    RecipeServiceError,
    format_meal_plan_params,
    full_image_url,
)
from dietitian.recipes.shopping import generate_shopping_list


def _client(handler) -> RecipeClient:
    return RecipeClient(
        base_url="https://recipes.test",
        api_key="k-123",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestRecipeClient(unittest.TestCase):
    def test_recipe_details_success(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"id": 42, "title": "Soup", "image": "soup-42.jpg"})

        recipe = asyncio.run(_client(handler).get_recipe_details(42))
        self.assertEqual(seen["path"], "/recipes/42/information")
        self.assertEqual(seen["params"]["apiKey"], "k-123")
        self.assertEqual(seen["params"]["includeNutrition"], "true")
        self.assertEqual(recipe["image"], "https://spoonacular.com/recipeImages/soup-42.jpg")

    def test_recipe_details_status_mapping(self) -> None:
        cases = [(404, RecipeNotFoundError), (402, RecipeQuotaError), (500, RecipeServiceError)]
        for status, error in cases:
            with self.subTest(status=status):
                client = _client(lambda request, s=status: httpx.Response(s, json={}))
                with self.assertRaises(error):
                    asyncio.run(client.get_recipe_details(1))

    def test_generate_meal_plan_falls_back_on_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with self.assertLogs("dietitian.recipes.client", level="WARNING"):
            plan = asyncio.run(_client(handler).generate_meal_plan({"targetCalories": 1800}))
        self.assertEqual(sorted(plan["week"].keys()), ["monday", "tuesday", "wednesday"])
        self.assertEqual(len(plan["week"]["monday"]["meals"]), 3)

    def test_generate_meal_plan_fills_images_and_calories(self) -> None:
        body = {
            "week": {
                "monday": {
                    "meals": [{"id": 1, "title": "Eggs", "image": "eggs.jpg"}, {"id": 2, "title": "Soup"}],
                    "nutrients": {"calories": 900},
                }
            }
        }
        client = _client(lambda request: httpx.Response(200, json=body))
        plan = asyncio.run(client.generate_meal_plan({}))
        meals = plan["week"]["monday"]["meals"]
        self.assertEqual(meals[0]["image"], "https://spoonacular.com/recipeImages/eggs.jpg")
        self.assertEqual(meals[1]["image"], PLACEHOLDER_IMAGE)
        self.assertEqual(meals[0]["calories"], 0)

    def test_alternatives_empty_on_failure(self) -> None:
        client = _client(lambda request: httpx.Response(503, json={}))
        self.assertEqual(asyncio.run(client.find_alternative_recipes({"title": "Eggs"}, "breakfast")), [])

    def test_search_falls_back_to_bundled_recipes(self) -> None:
        client = _client(lambda request: httpx.Response(402, json={}))
        recipes = asyncio.run(client.search_recipes_by_meal_type("lunch", "chicken"))
        self.assertEqual([r["id"] for r in recipes], [3, 4])
        self.assertTrue(all(r["mealType"] == "lunch" for r in recipes))

    def test_search_formats_results(self) -> None:
        body = {
            "results": [
                {
                    "id": 7,
                    "title": "Bowl",
                    "image": "https://img.test/bowl.jpg",
                    "readyInMinutes": 15,
                    "nutrition": {
                        "nutrients": [
                            {"name": "Calories", "amount": 420},
                            {"name": "Protein", "amount": 30},
                            {"name": "Carbohydrates", "amount": 40},
                            {"name": "Fat", "amount": 12},
                        ]
                    },
                }
            ]
        }
        client = _client(lambda request: httpx.Response(200, json=body))
        [recipe] = asyncio.run(client.search_recipes_by_meal_type("dinner"))
        self.assertEqual(recipe["name"], "Bowl")
        self.assertEqual(recipe["calories"], 420.0)
        self.assertEqual(recipe["nutrition"]["carbs"], 40.0)
        self.assertEqual(recipe["prepTime"], 15)
        self.assertEqual(recipe["mealType"], "dinner")


class TestRecipeHelpers(unittest.TestCase):
    def test_format_meal_plan_params(self) -> None:
        params = format_meal_plan_params({"diet": "Ketogenic", "randomSeed": 250, "exclude": "nuts"})
        self.assertEqual(
            params,
            {"timeFrame": "week", "targetCalories": 2000, "diet": "keto", "exclude": "nuts", "offset": 50},
        )
        self.assertNotIn("diet", format_meal_plan_params({"diet": "carnivore"}))

    def test_full_image_url(self) -> None:
        self.assertEqual(full_image_url(None), PLACEHOLDER_IMAGE)
        self.assertEqual(full_image_url("https://x.test/a.png"), "https://x.test/a.png")


class TestShoppingList(unittest.TestCase):
    def test_sums_by_name_and_groups_by_aisle(self) -> None:
        meals = [
            {
                "id": 1,
                "title": "Omelette",
                "extendedIngredients": [
                    {"name": "egg", "amount": 2, "unit": "", "aisle": "Dairy"},
                    {"name": "milk", "amount": 0.5, "unit": "cup", "aisle": "Dairy"},
                ],
            },
            {
                "id": 2,
                "title": "Frittata",
                "extendedIngredients": [
                    {"name": "egg", "amount": 4, "aisle": "Dairy"},
                    {"original": "1 onion", "aisle": "Produce"},
                ],
            },
            {"id": 3, "title": "Mystery Stew"},
            {"title": "No id"},
        ]
        aisles = generate_shopping_list(meals)
        dairy = {item["name"]: item["amount"] for item in aisles["Dairy"]}
        self.assertEqual(dairy, {"egg": 6.0, "milk": 0.5})
        self.assertEqual(aisles["Produce"][0]["name"], "1 onion")
        self.assertEqual(aisles["Produce"][0]["amount"], 1.0)
        self.assertEqual([i["name"] for i in aisles["Other"]], ["Ingredients for Mystery Stew"])


if __name__ == "__main__":
    unittest.main()
