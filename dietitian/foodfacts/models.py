# -*- coding: utf-8 -*-
"""Food facts — Pydantic models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProcessingMarker(BaseModel):
    type: str
    name: str = ""
    code: Optional[str] = None


class ProcessingSummary(BaseModel):
    nova_group: Optional[int] = None
    title: str
    description: str
    advice: str
    markers: List[ProcessingMarker] = Field(default_factory=list)
    markers_text: str = ""


class ProductFacts(BaseModel):
    barcode: str
    name: str = ""
    brands: str = ""
    image: Optional[str] = None
    nova_group: Optional[int] = None
    nutriscore_grade: Optional[str] = None
    nutrient_levels: Dict[str, str] = Field(default_factory=dict)
    nutriments: Dict[str, Any] = Field(default_factory=dict)
    ingredients_text: str = ""
    processing: ProcessingSummary
