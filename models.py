"""
Database Models
SQLAlchemy ORM models for MedTrack
"""

import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Date, Index, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum

from database import Base


def generate_id() -> str:
    """Opaque document identifier"""
    return str(uuid.uuid4())


# ==================== ENUMS ====================

class UserRole(str, PyEnum):
    """Roles resolved by the session provider"""
    OPERATOR = "operator"
    DOCTOR = "doctor"
    PATIENT = "patient"


class ConsumptionStatus(str, PyEnum):
    """Outcome of one expected dose"""
    PENDING = "pending"
    TAKEN = "taken"
    MISSED = "missed"
    LATE = "late"


class Gender(str, PyEnum):
    MALE = "male"
    FEMALE = "female"


# Statuses that carry an actual intake time
TIMED_STATUSES = {ConsumptionStatus.TAKEN.value, ConsumptionStatus.LATE.value}


# ==================== MODELS ====================

class User(Base):
    """Authenticated account with a role"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.OPERATOR.value)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    doctor_profile = relationship("Doctor", back_populates="user", uselist=False)


class RevokedToken(Base):
    """Token ids invalidated by logout"""
    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    user_id = Column(String(36), index=True)
    expires_at = Column(DateTime)
    revoked_at = Column(DateTime, default=datetime.utcnow)


class Doctor(Base):
    """Doctor profile, keyed by the same id as its User"""
    __tablename__ = "doctors"

    id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    specialization = Column(String(100), nullable=False)
    license_number = Column(String(100), nullable=False)  # practice license (SIP)
    phone = Column(String(30))
    address = Column(Text)
    hospital = Column(String(255))
    experience = Column(Integer, default=0)  # years

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="doctor_profile")
    patients = relationship("Patient", back_populates="doctor")


class Patient(Base):
    """Patient demographics and clinical summary, assigned to one doctor"""
    __tablename__ = "patients"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))

    name = Column(String(255), nullable=False)
    age = Column(Integer)
    gender = Column(String(10), nullable=False)
    email = Column(String(255))
    phone = Column(String(30))
    condition = Column(String(255))
    allergies = Column(JSON, default=list)
    emergency_contact = Column(String(255))
    address = Column(Text)

    doctor_id = Column(String(36), ForeignKey("doctors.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    doctor = relationship("Doctor", back_populates="patients")
    schedules = relationship("MedicationSchedule", back_populates="patient", cascade="all, delete-orphan")
    consumption_records = relationship("ConsumptionRecord", back_populates="patient", cascade="all, delete-orphan")


class MedicationSchedule(Base):
    """Prescribed regimen: fixed daily dose times over a date range"""
    __tablename__ = "medication_schedules"

    id = Column(String(36), primary_key=True, default=generate_id)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False)
    patient_name = Column(String(255), default="")

    medication_name = Column(String(255), nullable=False)
    dosage = Column(String(100), nullable=False)
    frequency = Column(String(100), default="")
    times = Column(JSON, default=list)  # ["08:00", "20:00"]

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    prescribed_by = Column(String(36), index=True)
    prescribed_by_name = Column(String(255))

    instructions = Column(Text, default="")
    notes = Column(Text)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = relationship("Patient", back_populates="schedules")
    consumption_records = relationship("ConsumptionRecord", back_populates="schedule", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_medication_schedules_patient_active", "patient_id", "is_active"),
    )

    @property
    def duration_days(self) -> int:
        if not self.start_date or not self.end_date or self.end_date < self.start_date:
            return 0
        return (self.end_date - self.start_date).days + 1

    @property
    def total_doses(self) -> int:
        return self.duration_days * len(self.times or [])


class ConsumptionRecord(Base):
    """One expected dose derived from a schedule"""
    __tablename__ = "consumption_records"

    id = Column(String(36), primary_key=True, default=generate_id)
    schedule_id = Column(String(36), ForeignKey("medication_schedules.id"), nullable=False)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False)

    # Denormalized for listing without joins
    patient_name = Column(String(255), default="")
    medication_name = Column(String(255), default="")
    dosage = Column(String(100), default="")

    scheduled_date = Column(Date, nullable=False)
    scheduled_time = Column(String(5), nullable=False)  # "HH:MM"
    scheduled_datetime = Column(DateTime, nullable=False)
    actual_time = Column(DateTime)

    status = Column(String(20), nullable=False, default=ConsumptionStatus.PENDING.value)
    notes = Column(Text, default="")
    side_effects_reported = Column(JSON, default=list)
    recorded_by = Column(String(36), default="system")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    schedule = relationship("MedicationSchedule", back_populates="consumption_records")
    patient = relationship("Patient", back_populates="consumption_records")

    __table_args__ = (
        Index("ix_consumption_records_schedule_slot", "schedule_id", "scheduled_date", "scheduled_time"),
        Index("ix_consumption_records_patient_date", "patient_id", "scheduled_date"),
        Index("ix_consumption_records_status", "status"),
    )
