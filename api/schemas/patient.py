"""
Patient Schemas
Pydantic models for patient-related API requests and responses
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict

from models import Gender


# ==================== BASE SCHEMAS ====================

class PatientBase(BaseModel):
    """Base patient schema with common fields"""
    name: str = Field(..., min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Gender
    # Use plain string for email to allow special-use/test domains in fixtures
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    condition: Optional[str] = Field(None, max_length=255)
    emergency_contact: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None


# ==================== REQUEST SCHEMAS ====================

class PatientCreate(PatientBase):
    """Schema for creating a new patient"""
    doctor_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    allergies: List[str] = Field(default_factory=list)


class PatientUpdate(BaseModel):
    """Schema for updating patient information"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[Gender] = None
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=30)
    condition: Optional[str] = Field(None, max_length=255)
    emergency_contact: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    doctor_id: Optional[str] = Field(None, min_length=1)
    allergies: Optional[List[str]] = None


# ==================== RESPONSE SCHEMAS ====================

class PatientResponse(PatientBase):
    """Schema for patient response"""
    id: str
    user_id: Optional[str] = None
    doctor_id: str
    allergies: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PatientList(BaseModel):
    """List of patients visible to the caller"""
    patients: List[PatientResponse]
    total: int
