"""
Dashboard Schemas
"""

from typing import List
from pydantic import BaseModel, ConfigDict

from api.schemas.record import RecordResponse, RecordStats


class DashboardStats(BaseModel):
    total_patients: int
    total_schedules: int
    compliance_rate: int
    today_taken: int
    today_missed: int


class DailyBucket(BaseModel):
    """Compliance for one day"""
    date: str
    label: str
    total: int
    taken: int
    compliance: int
    missed: int

    model_config = ConfigDict(from_attributes=True)


class MonthlyBucket(BaseModel):
    """Compliance for one month"""
    month: str
    label: str
    total: int
    taken: int
    compliance: int

    model_config = ConfigDict(from_attributes=True)


class CategorySlice(BaseModel):
    name: str
    value: int

    model_config = ConfigDict(from_attributes=True)


class DashboardResponse(BaseModel):
    """Compliance overview for the caller's scope"""
    stats: DashboardStats
    summary: RecordStats
    daily: List[DailyBucket]
    monthly: List[MonthlyBucket]
    categories: List[CategorySlice]
    recent_activity: List[RecordResponse]
