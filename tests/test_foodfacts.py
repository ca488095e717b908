# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import unittest

import httpx

from dietitian.foodfacts.client import (
    BarcodeLookup,
    FoodFactsClient,
    FoodFactsError,
    FoodFactsNotFoundError,
    StaleLookupError,
    grade_from_score,
    nova_group,
    nutriscore_grade,
    product_facts,
)
from dietitian.request_guard import LatestRequestGuard


PRODUCT = {
    "product_name": "Cola",
    "brands": "Fizz Co",
    "image_front_url": "https://img.test/cola.jpg",
    "nutrient_levels": {"sugars": "high", "fat": "low"},
    "nutriments": {"sugars_100g": 10.6, "energy-kcal_100g": 42},
    "additives_tags": ["en:e150d", "en:e338", "en:sugar"],
    "additives_original_tags": ["en:e150d"],
    "ingredients": [{"text": "water"}, {"text": "natural flavourings"}],
    "knowledge_panels": {
        "nutriscore_2023": {"elements": [{"text": "Nutri-Score grade e for this product"}]},
        "nova": {"title_element": {"group": "4"}},
    },
}


def _client(handler) -> FoodFactsClient:
    return FoodFactsClient(base_url="https://facts.test", timeout=5, transport=httpx.MockTransport(handler))


class TestProductFacts(unittest.TestCase):
    def test_product_fields_and_processing_summary(self) -> None:
        facts = product_facts("5449000000996", PRODUCT)
        self.assertEqual(facts.name, "Cola")
        self.assertEqual(facts.nutriscore_grade, "E")
        self.assertEqual(facts.nova_group, 4)
        self.assertEqual(facts.nutrient_levels["sugars"], "high")
        self.assertEqual(facts.processing.title, "Ultra-processed foods")
        codes = [m.code for m in facts.processing.markers if m.type == "additive"]
        self.assertEqual(codes, ["E150D", "E338"])
        self.assertEqual(facts.processing.markers[0].name, "e150d")
        self.assertEqual(facts.processing.markers[-1].name, "Flavouring")
        self.assertEqual(facts.processing.markers_text, "3 ultra-processing markers")

    def test_direct_fields_win(self) -> None:
        self.assertEqual(nutriscore_grade({"nutriscore_grade": "b", "knowledge_panels": PRODUCT["knowledge_panels"]}), "B")
        self.assertEqual(nova_group({"nova_group": 1, "knowledge_panels": PRODUCT["knowledge_panels"]}), 1)

    def test_grade_lookup_order(self) -> None:
        by_key = {"knowledge_panels": {"my_nutri_score": {"title_element": {"grade": "a"}}}}
        self.assertEqual(nutriscore_grade(by_key), "A")
        by_title = {"knowledge_panels": {"p1": {"title": "Nutri-Score", "elements": [{"grade": "d"}]}}}
        self.assertEqual(nutriscore_grade(by_title), "D")
        self.assertEqual(nutriscore_grade({"nutriscore_score": 5}), "C")
        self.assertIsNone(nutriscore_grade({}))

    def test_grade_from_score_bands(self) -> None:
        self.assertEqual(
            [grade_from_score(s) for s in (-3, 2, 10, 18, 25)],
            ["A", "B", "C", "D", "E"],
        )
        self.assertIsNone(grade_from_score("x"))

    def test_nova_group_from_panel_text(self) -> None:
        product = {"knowledge_panels": {"food_processing": {"elements": [{"text": "NOVA group 3"}]}}}
        self.assertEqual(nova_group(product), 3)
        self.assertIsNone(nova_group({"nova_group": 9}))


class TestFoodFactsClient(unittest.TestCase):
    def test_get_product(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            return httpx.Response(200, json={"status": 1, "product": PRODUCT})

        facts = asyncio.run(_client(handler).get_product("5449000000996"))
        self.assertEqual(seen["path"], "/api/v2/product/5449000000996")
        self.assertEqual(facts.barcode, "5449000000996")
        self.assertEqual(facts.brands, "Fizz Co")

    def test_missing_product(self) -> None:
        for response in (httpx.Response(200, json={"status": 0}), httpx.Response(404, json={})):
            with self.subTest(status=response.status_code):
                client = _client(lambda request, r=response: r)
                with self.assertRaises(FoodFactsNotFoundError):
                    asyncio.run(client.get_product("123456"))

    def test_network_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        with self.assertRaises(FoodFactsError) as ctx:
            asyncio.run(_client(handler).get_product("123456"))
        self.assertNotIsInstance(ctx.exception, FoodFactsNotFoundError)


class _GatedClient:
    def __init__(self) -> None:
        self.gates = {}

    async def get_product(self, barcode: str):
        await self.gates[barcode].wait()
        return product_facts(barcode, {"product_name": f"product {barcode}"})


class TestBarcodeLookup(unittest.TestCase):
    def test_only_latest_scan_is_committed(self) -> None:
        async def scenario():
            client = _GatedClient()
            client.gates = {"111": asyncio.Event(), "222": asyncio.Event()}
            lookup = BarcodeLookup(client)
            first = asyncio.create_task(lookup.lookup("111"))
            await asyncio.sleep(0)
            second = asyncio.create_task(lookup.lookup("222"))
            await asyncio.sleep(0)
            client.gates["111"].set()
            client.gates["222"].set()
            results = await asyncio.gather(first, second, return_exceptions=True)
            return lookup, results

        lookup, (first, second) = asyncio.run(scenario())
        self.assertIsInstance(first, StaleLookupError)
        self.assertEqual(second.barcode, "222")
        self.assertEqual(lookup.current().barcode, "222")


    def test_lookup_without_retain_clears_scope(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"status": 1, "product": PRODUCT}))
        guard = LatestRequestGuard()
        lookup = BarcodeLookup(client, guard=guard)
        facts = asyncio.run(lookup.lookup("5449000000996", scope="barcode:u1", retain=False))
        self.assertEqual(facts.name, "Cola")
        self.assertIsNone(guard.current_key("barcode:u1"))
        self.assertIsNone(guard.value("barcode:u1"))

        missing = BarcodeLookup(_client(lambda request: httpx.Response(404, json={})), guard=guard)
        with self.assertRaises(FoodFactsNotFoundError):
            asyncio.run(missing.lookup("123456", scope="barcode:u1", retain=False))
        self.assertIsNone(guard.current_key("barcode:u1"))


class TestLatestRequestGuard(unittest.TestCase):
    def test_release_only_forgets_the_latest_ticket(self) -> None:
        guard = LatestRequestGuard()
        old = guard.begin("barcode", "111")
        new = guard.begin("barcode", "222")
        guard.release(old)
        self.assertEqual(guard.current_key("barcode"), "222")
        guard.commit(new, "facts")
        guard.release(new)
        self.assertIsNone(guard.current_key("barcode"))
        self.assertIsNone(guard.value("barcode"))
        self.assertFalse(guard.is_current(new))

    def test_stale_ticket_is_dropped(self) -> None:
        guard = LatestRequestGuard()
        old = guard.begin("patient", "p1")
        new = guard.begin("patient", "p2")
        self.assertFalse(guard.is_current(old))
        with self.assertLogs("dietitian.request_guard", level="INFO"):
            self.assertFalse(guard.commit(old, "stale"))
        self.assertIsNone(guard.value("patient"))
        self.assertTrue(guard.commit(new, "fresh"))
        self.assertEqual(guard.value("patient"), "fresh")
        self.assertEqual(guard.current_key("patient"), "p2")

    def test_scopes_are_independent(self) -> None:
        guard = LatestRequestGuard()
        a = guard.begin("barcode", "111")
        b = guard.begin("patient", "p1")
        self.assertTrue(guard.commit(a, 1))
        self.assertTrue(guard.commit(b, 2))
        self.assertIsNone(guard.current_key("other"))


if __name__ == "__main__":
    unittest.main()
