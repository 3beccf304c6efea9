"""
Patients API Router
Endpoints for patient management
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

import models
from models import Gender
from api.deps import get_db, services, require_operator, require_staff
from api.schemas.patient import PatientCreate, PatientUpdate, PatientResponse, PatientList


router = APIRouter(prefix="/patients", tags=["patients"])


@router.post("/", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    patient_data: PatientCreate,
    user: models.User = Depends(require_operator),
    db: Session = Depends(get_db)
):
    """
    Create a new patient

    - **doctor_id**: Assigned doctor, must exist
    - **allergies**: List of allergy names
    """
    patient_service = services.get_patient_service()

    try:
        return await patient_service.create_patient(
            patient_data.model_dump(mode="json"),
            db=db
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/", response_model=PatientList)
async def list_patients(
    search: Optional[str] = Query(None, description="Search by name, email or condition"),
    gender: Optional[Gender] = Query(None),
    doctor_id: Optional[str] = Query(None),
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    List patients visible to the caller, newest first
    """
    patient_service = services.get_patient_service()

    patients = await patient_service.list_patients(
        user,
        search=search,
        gender=gender.value if gender else None,
        doctor_id=doctor_id,
        db=db
    )
    return PatientList(
        patients=[PatientResponse.model_validate(p) for p in patients],
        total=len(patients)
    )


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: str,
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Get patient by ID
    """
    patient_service = services.get_patient_service()

    patient = await patient_service.get_patient(patient_id, user, db=db)
    if not patient:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient {patient_id} not found"
        )
    return patient


@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: str,
    patient_data: PatientUpdate,
    user: models.User = Depends(require_operator),
    db: Session = Depends(get_db)
):
    """
    Update patient information
    """
    patient_service = services.get_patient_service()

    try:
        patient = await patient_service.update_patient(
            patient_id,
            patient_data.model_dump(mode="json", exclude_unset=True, exclude_none=True),
            db=db
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if not patient:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient {patient_id} not found"
        )
    return patient


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: str,
    user: models.User = Depends(require_operator),
    db: Session = Depends(get_db)
):
    """
    Delete a patient with their schedules and consumption records
    """
    patient_service = services.get_patient_service()

    if not await patient_service.delete_patient(patient_id, db=db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Patient {patient_id} not found"
        )
