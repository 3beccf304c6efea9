"""
Doctor Schemas
Pydantic models for doctor management requests and responses
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


# ==================== BASE SCHEMAS ====================

class DoctorBase(BaseModel):
    """Base doctor schema with common fields"""
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    specialization: str = Field(..., min_length=1, max_length=100)
    license_number: str = Field(..., min_length=1, max_length=100, description="Practice license number")
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    hospital: Optional[str] = Field(None, max_length=255)
    experience: int = Field(default=0, ge=0, le=80, description="Years of practice")


# ==================== REQUEST SCHEMAS ====================

class DoctorCreate(DoctorBase):
    """Schema for creating a doctor account"""
    password: str = Field(..., min_length=6, max_length=128)


class DoctorUpdate(BaseModel):
    """Schema for updating a doctor profile"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    specialization: Optional[str] = Field(None, min_length=1, max_length=100)
    license_number: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    hospital: Optional[str] = Field(None, max_length=255)
    experience: Optional[int] = Field(None, ge=0, le=80)


# ==================== RESPONSE SCHEMAS ====================

class DoctorResponse(DoctorBase):
    """Schema for doctor response"""
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DoctorList(BaseModel):
    doctors: List[DoctorResponse]
    total: int
