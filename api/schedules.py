"""
Schedules API Router
Endpoints for medication schedule management
"""

from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

import models
from config import CollectionNames
from api.deps import get_db, services, require_staff
from api.schemas.schedule import (
    ScheduleCreate,
    ScheduleUpdate,
    ScheduleResponse,
    ScheduleWriteResponse,
    ScheduleList,
)
from services.schedule_service import schedule_snapshot
from tools.webhook_notifier import webhook_notifier, build_payload, WebhookAction


router = APIRouter(prefix="/schedules", tags=["schedules"])


def _write_response(result: dict) -> ScheduleWriteResponse:
    return ScheduleWriteResponse(
        schedule=ScheduleResponse.model_validate(result["schedule"]),
        records_created=result["records_created"],
        records_deleted=result["records_deleted"]
    )


@router.post("/", response_model=ScheduleWriteResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    schedule_data: ScheduleCreate,
    background_tasks: BackgroundTasks,
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Create a medication schedule and its consumption records

    - **times**: Daily dose times in HH:MM format
    - **start_date** / **end_date**: Inclusive date range
    """
    schedule_service = services.get_schedule_service()

    try:
        result = await schedule_service.create_schedule(
            schedule_data.model_dump(),
            user,
            db=db
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    schedule = result["schedule"]
    payload = build_payload(
        WebhookAction.CREATE,
        CollectionNames.MEDICATION_SCHEDULES,
        schedule.id,
        data=schedule_snapshot(schedule),
        user=user
    )
    background_tasks.add_task(webhook_notifier.send, payload)

    return _write_response(result)


@router.get("/", response_model=ScheduleList)
async def list_schedules(
    search: Optional[str] = Query(None, description="Search by patient, medication or dosage"),
    patient_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|inactive)$"),
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    List schedules of the caller's patients, newest first
    """
    schedule_service = services.get_schedule_service()

    schedules = await schedule_service.list_schedules(
        user,
        search=search,
        patient_id=patient_id,
        status=status_filter,
        db=db
    )
    return ScheduleList(
        schedules=[ScheduleResponse.model_validate(s) for s in schedules],
        total=len(schedules)
    )


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: str,
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Get schedule by ID
    """
    schedule_service = services.get_schedule_service()

    schedule = await schedule_service.get_schedule(schedule_id, user, db=db)
    if not schedule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Schedule {schedule_id} not found"
        )
    return schedule


@router.put("/{schedule_id}", response_model=ScheduleWriteResponse)
async def update_schedule(
    schedule_id: str,
    schedule_data: ScheduleUpdate,
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Update a schedule

    Changing times or dates of an active schedule, or reactivating it,
    regenerates its records. Deactivating removes its pending records.
    """
    schedule_service = services.get_schedule_service()

    try:
        result = await schedule_service.update_schedule(
            schedule_id,
            schedule_data.model_dump(exclude_unset=True, exclude_none=True),
            user,
            db=db
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if not result:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Schedule {schedule_id} not found"
        )
    return _write_response(result)


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: str,
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Delete a schedule and all of its consumption records
    """
    schedule_service = services.get_schedule_service()

    deleted = await schedule_service.delete_schedule(schedule_id, user, db=db)
    if deleted is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Schedule {schedule_id} not found"
        )
    return {"success": True, "records_deleted": deleted}
