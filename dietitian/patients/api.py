# -*- coding: utf-8 -*-
"""Patient management endpoints (doctor side) + a patient's own doctor."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user, require_doctor
from .models import (
    AssignmentResponse,
    AssignPatientRequest,
    DoctorInfo,
    DoctorStatistics,
    PatientListResponse,
    PatientSummary,
)
from .storage import (
    assign_patient,
    doctor_statistics,
    get_patient_doctor,
    get_patient_for_doctor,
    list_assigned_patients,
    remove_patient_assignment,
    search_patients,
)

router = APIRouter(prefix="/api/patients", tags=["Patients"])


@router.get("", response_model=PatientListResponse, summary="List assigned patients")
def list_patients(user: dict = Depends(require_doctor)):
    return PatientListResponse(patients=[PatientSummary(**p) for p in list_assigned_patients(user["id"])])


@router.get("/search", response_model=PatientListResponse, summary="Search patients by name or email")
def search(
    q: str = Query(default="", max_length=200),
    user: dict = Depends(require_doctor),
):
    return PatientListResponse(patients=[PatientSummary(**p) for p in search_patients(q)])


@router.get("/statistics", response_model=DoctorStatistics, summary="Doctor dashboard statistics")
def statistics(user: dict = Depends(require_doctor)):
    return DoctorStatistics(**doctor_statistics(user["id"]))


@router.get("/my-doctor", response_model=Optional[DoctorInfo], summary="Get the current patient's doctor")
def my_doctor(user: dict = Depends(get_current_user)):
    doctor = get_patient_doctor(user)
    return DoctorInfo(**doctor) if doctor else None


@router.post("/assignments", response_model=AssignmentResponse, summary="Assign a patient")
def create_assignment(
    request: AssignPatientRequest,
    user: dict = Depends(require_doctor),
):
    changed = assign_patient(doctor_id=user["id"], patient_id=request.patient_id)
    return AssignmentResponse(patient_id=request.patient_id, changed=changed)


@router.delete("/assignments/{patient_id}", response_model=AssignmentResponse, summary="Remove a patient assignment")
def delete_assignment(patient_id: str, user: dict = Depends(require_doctor)):
    changed = remove_patient_assignment(doctor_id=user["id"], patient_id=patient_id)
    return AssignmentResponse(patient_id=patient_id, changed=changed)


@router.get("/{patient_id}", response_model=PatientSummary, summary="Get an assigned patient")
def get_patient(patient_id: str, user: dict = Depends(require_doctor)):
    return PatientSummary(**get_patient_for_doctor(doctor_id=user["id"], patient_id=patient_id))
