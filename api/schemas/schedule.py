"""
Schedule Schemas
Pydantic models for medication schedule requests and responses
"""

from typing import Optional, List
from datetime import datetime, date
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from tools.schedule_expander import parse_time_of_day


def _check_times(times: Optional[List[str]]) -> Optional[List[str]]:
    if times is None:
        return times
    cleaned = []
    for value in times:
        parse_time_of_day(value)
        cleaned.append(value.strip())
    if len(set(cleaned)) != len(cleaned):
        raise ValueError("Times of day must be unique")
    return cleaned


# ==================== REQUEST SCHEMAS ====================

class ScheduleCreate(BaseModel):
    """Schema for creating a medication schedule"""
    patient_id: str = Field(..., min_length=1)
    medication_name: str = Field(..., min_length=1, max_length=255)
    dosage: str = Field(..., min_length=1, max_length=100)
    frequency: str = Field(default="", max_length=100)
    times: List[str] = Field(default_factory=list, description="Times of day in HH:MM format")
    start_date: date
    end_date: date
    instructions: str = ""
    notes: Optional[str] = None
    is_active: bool = True

    @field_validator("times")
    @classmethod
    def validate_times(cls, v):
        return _check_times(v)

    @model_validator(mode="after")
    def validate_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.is_active and not self.times:
            raise ValueError("An active schedule needs at least one time of day")
        return self


class ScheduleUpdate(BaseModel):
    """Schema for updating a schedule; omitted fields are left unchanged"""
    medication_name: Optional[str] = Field(None, min_length=1, max_length=255)
    dosage: Optional[str] = Field(None, min_length=1, max_length=100)
    frequency: Optional[str] = Field(None, max_length=100)
    times: Optional[List[str]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    instructions: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("times")
    @classmethod
    def validate_times(cls, v):
        return _check_times(v)

    @model_validator(mode="after")
    def validate_range(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.is_active and self.times is not None and not self.times:
            raise ValueError("An active schedule needs at least one time of day")
        return self


# ==================== RESPONSE SCHEMAS ====================

class ScheduleResponse(BaseModel):
    """Schema for schedule response"""
    id: str
    patient_id: str
    patient_name: str = ""
    medication_name: str
    dosage: str
    frequency: Optional[str] = ""
    times: List[str] = Field(default_factory=list)
    start_date: date
    end_date: date
    prescribed_by: Optional[str] = None
    prescribed_by_name: Optional[str] = None
    instructions: Optional[str] = ""
    notes: Optional[str] = None
    is_active: bool
    duration_days: int = 0
    total_doses: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ScheduleWriteResponse(BaseModel):
    """Schedule with the record changes its write caused"""
    schedule: ScheduleResponse
    records_created: int = 0
    records_deleted: int = 0


class ScheduleList(BaseModel):
    schedules: List[ScheduleResponse]
    total: int
