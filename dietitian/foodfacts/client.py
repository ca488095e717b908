# -*- coding: utf-8 -*-
"""Food facts client (Open Food Facts v2 product API).

Product records are loosely shaped: the Nutri-Score grade and NOVA group live
either on the product itself or somewhere inside ``knowledge_panels``, so both
are resolved through an ordered list of lookups.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

import httpx

from ..config import settings
from ..request_guard import LatestRequestGuard
from .models import ProcessingMarker, ProcessingSummary, ProductFacts

logger = logging.getLogger(__name__)

_GRADE_RE = re.compile(r"grade ([a-e])", re.IGNORECASE)
_GROUP_RE = re.compile(r"group ([1-4])", re.IGNORECASE)
_ADDITIVE_RE = re.compile(r"en:e(\d+)([a-z]*)", re.IGNORECASE)

NUTRISCORE_PANELS = ("nutriscore", "nutriscore_2023", "nutriscore_2021", "nutri-score", "nutrition_score")
NOVA_PANELS = ("nova", "nova_group", "nova_groups", "food_processing", "processing")
FLAVOURING_WORDS = ("flavour", "flavor", "aroma")

_NOVA_TEXT = {
    1: (
        "Unprocessed or minimally processed foods",
        "These are natural foods with minimal alteration, such as fresh fruits and vegetables, "
        "whole grains, nuts, meats and milk.",
        "These foods should form the foundation of a healthy diet.",
    ),
    2: (
        "Processed culinary ingredients",
        "Ingredients extracted from Group 1 foods or from nature, such as oils, butter, sugar and salt.",
        "Use these ingredients in moderation to prepare, season and cook Group 1 foods.",
    ),
    3: (
        "Processed foods",
        "Simple products made by adding Group 2 ingredients to Group 1 foods, such as canned "
        "vegetables, cheeses and freshly made breads.",
        "These can be included in balanced diets but should be consumed in moderation.",
    ),
    4: (
        "Ultra-processed foods",
        "Industrial formulations containing little or no whole foods and often additives like "
        "colors, flavors, sweeteners and emulsifiers.",
        "Limit ultra-processed foods. High consumption is linked with obesity, heart disease and diabetes.",
    ),
}
_NOVA_UNKNOWN = (
    "Unknown processing level",
    "The processing level of this product could not be determined.",
    "Focus on whole, minimally processed foods as the foundation of your diet.",
)


class FoodFactsError(Exception):
    """The food facts source could not be reached or returned garbage."""


class FoodFactsNotFoundError(FoodFactsError):
    pass


class StaleLookupError(FoodFactsError):
    """A newer lookup was started while this one was in flight."""


def _panels(product: Mapping[str, Any]) -> Dict[str, Any]:
    panels = product.get("knowledge_panels")
    return panels if isinstance(panels, dict) else {}


def _elements(panel: Mapping[str, Any]) -> Iterable[Mapping[str, Any]]:
    elements = panel.get("elements")
    if not isinstance(elements, list):
        return []
    return [e for e in elements if isinstance(e, dict)]


def _title_value(panel: Any, field: str) -> Any:
    if not isinstance(panel, dict):
        return None
    title = panel.get("title_element")
    return title.get(field) if isinstance(title, dict) else None


def _grade_from_panel(panel: Any, *, include_title: bool = True) -> Optional[str]:
    if not isinstance(panel, dict):
        return None
    if include_title and _title_value(panel, "grade"):
        return str(_title_value(panel, "grade")).upper()
    for element in _elements(panel):
        if element.get("grade"):
            return str(element["grade"]).upper()
        m = _GRADE_RE.search(str(element.get("text") or ""))
        if m:
            return m.group(1).upper()
    return None


def _as_group(value: Any) -> Optional[int]:
    try:
        group = int(value)
    except (TypeError, ValueError):
        return None
    return group if 1 <= group <= 4 else None


def _group_from_panel(panel: Any) -> Optional[int]:
    if not isinstance(panel, dict):
        return None
    group = _as_group(_title_value(panel, "group"))
    if group:
        return group
    for element in _elements(panel):
        group = _as_group(element.get("group"))
        if group:
            return group
        m = _GROUP_RE.search(str(element.get("text") or ""))
        if m:
            return int(m.group(1))
    return None


def grade_from_score(score: Any) -> Optional[str]:
    try:
        value = float(score)
    except (TypeError, ValueError):
        return None
    if value <= -1:
        return "A"
    if value <= 2:
        return "B"
    if value <= 10:
        return "C"
    if value <= 18:
        return "D"
    return "E"


def nutriscore_grade(product: Mapping[str, Any]) -> Optional[str]:
    for field in ("nutriscore_grade", "nutrition_grades"):
        if isinstance(product.get(field), str) and product[field].strip():
            return product[field].strip().upper()

    panels = _panels(product)
    for name in NUTRISCORE_PANELS:
        grade = _grade_from_panel(panels.get(name))
        if grade:
            return grade

    for key, panel in panels.items():
        lowered = key.lower()
        if "nutri" in lowered and "score" in lowered:
            grade = _grade_from_panel(panel)
            if grade:
                return grade

    for panel in panels.values():
        if _title_value(panel, "grade"):
            return str(_title_value(panel, "grade")).upper()

    for panel in panels.values():
        if isinstance(panel, dict) and "Nutri-Score" in str(panel.get("title") or ""):
            grade = _grade_from_panel(panel, include_title=False)
            if grade:
                return grade

    groups = product.get("knowledge_panel_groups")
    if isinstance(groups, dict):
        for group in groups.values():
            for panel_id in (group or {}).get("panels") or []:
                if _title_value(panels.get(panel_id), "grade"):
                    return str(_title_value(panels[panel_id], "grade")).upper()

    if product.get("nutriscore_score") is not None:
        return grade_from_score(product["nutriscore_score"])
    return None


def nova_group(product: Mapping[str, Any]) -> Optional[int]:
    for field in ("nova_group", "nova_groups"):
        group = _as_group(product.get(field))
        if group:
            return group

    panels = _panels(product)
    for name in NOVA_PANELS:
        group = _group_from_panel(panels.get(name))
        if group:
            return group

    for key, panel in panels.items():
        lowered = key.lower()
        if "nova" in lowered or "processing" in lowered:
            group = _group_from_panel(panel)
            if group:
                return group
    return None


def processing_markers(product: Mapping[str, Any]) -> List[ProcessingMarker]:
    markers: List[ProcessingMarker] = []
    originals = [str(t) for t in product.get("additives_original_tags") or []]
    for tag in product.get("additives_tags") or []:
        m = _ADDITIVE_RE.search(str(tag))
        if not m:
            continue
        name = next((t.replace("en:", "") for t in originals if m.group(0) in t), "")
        markers.append(ProcessingMarker(type="additive", code=f"E{m.group(1)}{m.group(2)}".upper(), name=name))

    ingredients = product.get("ingredients") or []
    if any(
        isinstance(i, dict) and any(w in str(i.get("text") or "").lower() for w in FLAVOURING_WORDS)
        for i in ingredients
    ):
        markers.append(ProcessingMarker(type="ingredient", name="Flavouring"))
    return markers


def processing_summary(product: Mapping[str, Any], group: Optional[int] = None) -> ProcessingSummary:
    title, description, advice = _NOVA_TEXT.get(group or 0, _NOVA_UNKNOWN)
    markers = processing_markers(product)
    return ProcessingSummary(
        nova_group=group,
        title=title,
        description=description,
        advice=advice,
        markers=markers,
        markers_text=f"{len(markers)} ultra-processing markers" if group == 4 else "",
    )


def product_facts(barcode: str, product: Mapping[str, Any]) -> ProductFacts:
    group = nova_group(product)
    levels = product.get("nutrient_levels")
    nutriments = product.get("nutriments")
    return ProductFacts(
        barcode=barcode,
        name=str(product.get("product_name") or ""),
        brands=str(product.get("brands") or ""),
        image=product.get("image_front_url") or product.get("image_url"),
        nova_group=group,
        nutriscore_grade=nutriscore_grade(product),
        nutrient_levels={str(k): str(v) for k, v in levels.items()} if isinstance(levels, dict) else {},
        nutriments=dict(nutriments) if isinstance(nutriments, dict) else {},
        ingredients_text=str(product.get("ingredients_text") or ""),
        processing=processing_summary(product, group),
    )


class FoodFactsClient:
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.food_facts_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.food_facts_timeout
        self._transport = transport

    async def get_product(self, barcode: str) -> ProductFacts:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get(f"/api/v2/product/{barcode}")
                if resp.status_code == 404:
                    raise FoodFactsNotFoundError("Product not found or data is unavailable.")
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("Food facts lookup for %s failed: %s", barcode, exc)
            raise FoodFactsError("Failed to load product details. Please check your connection.") from exc
        except ValueError as exc:
            raise FoodFactsError("Food facts source returned invalid JSON") from exc

        if not isinstance(data, dict) or data.get("status") == 0 or not isinstance(data.get("product"), dict):
            raise FoodFactsNotFoundError("Product not found or data is unavailable.")
        return product_facts(barcode, data["product"])


class BarcodeLookup:
    """Barcode lookups where only the latest scan per scope may land."""

    def __init__(self, client: FoodFactsClient, guard: Optional[LatestRequestGuard] = None) -> None:
        self.client = client
        self.guard = guard or LatestRequestGuard()

    async def lookup(self, barcode: str, scope: str = "barcode", *, retain: bool = True) -> ProductFacts:
        """Fetch `barcode`; with `retain=False` the scope is cleared once this lookup settles."""
        ticket = self.guard.begin(scope, barcode)
        try:
            try:
                product = await self.client.get_product(barcode)
            except FoodFactsError:
                if not self.guard.is_current(ticket):
                    raise StaleLookupError(f"Lookup for {barcode} was superseded")
                raise
            if not self.guard.commit(ticket, product):
                raise StaleLookupError(f"Lookup for {barcode} was superseded")
            return product
        finally:
            if not retain:
                self.guard.release(ticket)

    def current(self, scope: str = "barcode") -> Optional[ProductFacts]:
        return self.guard.value(scope)


def get_food_facts_client() -> FoodFactsClient:
    return FoodFactsClient()
