"""
Doctors API Router
Endpoints for doctor account management
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

import models
from api.deps import get_db, services, require_operator, require_staff
from api.schemas.doctor import DoctorCreate, DoctorUpdate, DoctorResponse, DoctorList


router = APIRouter(prefix="/doctors", tags=["doctors"])


@router.post("/", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    doctor_data: DoctorCreate,
    user: models.User = Depends(require_operator),
    db: Session = Depends(get_db)
):
    """
    Create a doctor account

    - **email**: Login email, unique across all users
    - **password**: Initial password
    - **license_number**: Practice license number
    """
    doctor_service = services.get_doctor_service()

    try:
        return await doctor_service.create_doctor(
            name=doctor_data.name,
            email=doctor_data.email,
            password=doctor_data.password,
            specialization=doctor_data.specialization,
            license_number=doctor_data.license_number,
            phone=doctor_data.phone,
            address=doctor_data.address,
            hospital=doctor_data.hospital,
            experience=doctor_data.experience,
            db=db
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/", response_model=DoctorList)
async def list_doctors(
    search: Optional[str] = Query(None, description="Search by name, email or license"),
    specialization: Optional[str] = Query(None),
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    List doctors, newest first
    """
    doctor_service = services.get_doctor_service()

    doctors = await doctor_service.list_doctors(
        search=search,
        specialization=specialization,
        db=db
    )
    return DoctorList(
        doctors=[DoctorResponse.model_validate(d) for d in doctors],
        total=len(doctors)
    )


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(
    doctor_id: str,
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Get doctor by ID
    """
    doctor_service = services.get_doctor_service()

    doctor = await doctor_service.get_doctor(doctor_id, db=db)
    if not doctor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Doctor {doctor_id} not found"
        )
    return doctor


@router.put("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: str,
    doctor_data: DoctorUpdate,
    user: models.User = Depends(require_operator),
    db: Session = Depends(get_db)
):
    """
    Update a doctor profile
    """
    doctor_service = services.get_doctor_service()

    try:
        doctor = await doctor_service.update_doctor(
            doctor_id,
            doctor_data.model_dump(exclude_unset=True, exclude_none=True),
            db=db
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if not doctor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Doctor {doctor_id} not found"
        )
    return doctor


@router.delete("/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_doctor(
    doctor_id: str,
    user: models.User = Depends(require_operator),
    db: Session = Depends(get_db)
):
    """
    Delete a doctor and their account
    """
    doctor_service = services.get_doctor_service()

    try:
        deleted = await doctor_service.delete_doctor(doctor_id, db=db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Doctor {doctor_id} not found"
        )
