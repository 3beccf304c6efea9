"""
Dashboard API Router
Compliance overview for the caller's scope
"""

from dataclasses import asdict
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import models
from api.deps import get_db, services, require_staff
from api.schemas.dashboard import (
    DashboardResponse,
    DashboardStats,
    DailyBucket,
    MonthlyBucket,
    CategorySlice,
)
from api.schemas.record import RecordResponse, RecordStats


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/", response_model=DashboardResponse)
async def get_dashboard(
    user: models.User = Depends(require_staff),
    db: Session = Depends(get_db)
):
    """
    Totals, compliance rate, daily and monthly buckets, medication
    categories and recent activity
    """
    dashboard_service = services.get_dashboard_service()

    data = await dashboard_service.get_dashboard(user, db=db)

    return DashboardResponse(
        stats=DashboardStats(**data["stats"]),
        summary=RecordStats(**data["summary"].to_dict()),
        daily=[DailyBucket(**asdict(b)) for b in data["daily"]],
        monthly=[MonthlyBucket(**asdict(b)) for b in data["monthly"]],
        categories=[CategorySlice(**asdict(c)) for c in data["categories"]],
        recent_activity=[RecordResponse.model_validate(r) for r in data["recent_activity"]]
    )
