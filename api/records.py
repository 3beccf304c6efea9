"""
Consumption Records API Router
Endpoints for dose tracking
"""

from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

import models
from models import ConsumptionStatus
from api.deps import get_db, services, require_operator, require_staff
from api.schemas.record import (
    RecordUpdate,
    RecordResponse,
    RecordList,
    RecordStats,
    GenerateResponse,
)


router = APIRouter(prefix="/records", tags=["records"])


@router.get("/", response_model=RecordList)
async def list_records(
    status_filter: Optional[ConsumptionStatus] = Query(None, alias="status"),
    patient_id: Optional[str] = Query(None),
    scheduled_date: Optional[date] = Query(None, alias="date"),
    search: Optional[str] = Query(None, description="Search by patient or medication name"),
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    List consumption records visible to the caller, newest first
    """
    consumption_service = services.get_consumption_service()

    records = await consumption_service.list_records(
        user,
        status=status_filter.value if status_filter else None,
        patient_id=patient_id,
        scheduled_date=scheduled_date,
        search=search,
        db=db
    )
    return RecordList(
        records=[RecordResponse.model_validate(r) for r in records],
        total=len(records)
    )


@router.get("/stats", response_model=RecordStats)
async def record_stats(
    status_filter: Optional[ConsumptionStatus] = Query(None, alias="status"),
    patient_id: Optional[str] = Query(None),
    scheduled_date: Optional[date] = Query(None, alias="date"),
    search: Optional[str] = Query(None),
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Status counts and compliance rate for the filtered records
    """
    consumption_service = services.get_consumption_service()

    summary = await consumption_service.record_stats(
        user,
        status=status_filter.value if status_filter else None,
        patient_id=patient_id,
        scheduled_date=scheduled_date,
        search=search,
        db=db
    )
    return RecordStats.model_validate(summary)


@router.post("/generate", response_model=GenerateResponse)
async def generate_records(
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Create missing pending records for today and the next six days
    from every active schedule in the caller's reach
    """
    consumption_service = services.get_consumption_service()

    try:
        result = await consumption_service.generate_upcoming(user, db=db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return GenerateResponse(
        schedules=result["schedules"],
        records_created=result["records_created"],
        message=f"Created {result['records_created']} consumption records from active schedules"
    )


@router.get("/{record_id}", response_model=RecordResponse)
async def get_record(
    record_id: str,
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Get consumption record by ID
    """
    consumption_service = services.get_consumption_service()

    record = await consumption_service.get_record(record_id, user, db=db)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Record {record_id} not found"
        )
    return record


@router.put("/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: str,
    record_data: RecordUpdate,
    user: models.User = Depends(require_operator),
    db: Session = Depends(get_db)
):
    """
    Record the outcome of a dose

    - **taken** / **late**: stamps the actual intake time
    - **pending** / **missed**: clears it
    """
    consumption_service = services.get_consumption_service()

    record = await consumption_service.update_record(
        record_id,
        user,
        status=record_data.status,
        notes=record_data.notes,
        side_effects_reported=record_data.side_effects_reported,
        db=db
    )
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Record {record_id} not found"
        )
    return record
