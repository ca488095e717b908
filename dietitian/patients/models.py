# -*- coding: utf-8 -*-
"""Patients — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class PatientSummary(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    photo_url: Optional[str] = None
    user_type: str = "patient"
    created_at: Optional[str] = None
    assigned_doctor_id: Optional[str] = None
    current_meal_plan_id: Optional[str] = None


class PatientListResponse(BaseModel):
    patients: List[PatientSummary]


class AssignPatientRequest(BaseModel):
    patient_id: str = Field(..., min_length=1)


class AssignmentResponse(BaseModel):
    patient_id: str
    changed: bool


class DoctorInfo(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    specialization: str = "General Practice"


class DoctorStatistics(BaseModel):
    total_patients: int = 0
    active_meal_plans: int = 0
    patients_without_plans: int = 0
