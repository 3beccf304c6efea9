"""
Consumption Record Schemas
Pydantic models for consumption record requests and responses
"""

from typing import Optional, List
from datetime import datetime, date
from pydantic import BaseModel, Field, ConfigDict

from models import ConsumptionStatus


class RecordUpdate(BaseModel):
    """Outcome of a dose, entered by an operator"""
    status: Optional[ConsumptionStatus] = None
    notes: Optional[str] = None
    side_effects_reported: Optional[List[str]] = None


class RecordResponse(BaseModel):
    """Schema for consumption record response"""
    id: str
    schedule_id: str
    patient_id: str
    patient_name: str = ""
    medication_name: str = ""
    dosage: str = ""
    scheduled_date: date
    scheduled_time: str
    scheduled_datetime: datetime
    actual_time: Optional[datetime] = None
    status: ConsumptionStatus
    notes: Optional[str] = ""
    side_effects_reported: List[str] = Field(default_factory=list)
    recorded_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecordList(BaseModel):
    records: List[RecordResponse]
    total: int


class RecordStats(BaseModel):
    """Status counts over a filtered record list"""
    total: int
    taken: int
    missed: int
    late: int
    pending: int
    compliance_rate: int

    model_config = ConfigDict(from_attributes=True)


class GenerateResponse(BaseModel):
    """Result of generating upcoming records"""
    schedules: int
    records_created: int
    message: str
