"""
Pytest Configuration and Shared Fixtures
========================================

This module provides shared fixtures for all MedTrack tests.
Fixtures include database sessions, test clients, users with tokens,
and sample patients and schedules.
"""

import os
import sys
from datetime import date, timedelta
from typing import Generator, Dict, Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Keep the application engine off the working directory
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from database import Base
from models import User, Doctor, Patient, MedicationSchedule, UserRole
from security import get_password_hash, create_access_token
from api.deps import get_db
from app import app


TEST_PASSWORD = "secret123"


# ==================== DATABASE FIXTURES ====================

@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    Base.metadata.create_all(bind=engine)

    yield engine

    # Cleanup
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a test database session"""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client with database override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==================== USER FIXTURES ====================

@pytest.fixture(scope="session")
def password_hash() -> str:
    """One bcrypt hash shared by all fixture users"""
    return get_password_hash(TEST_PASSWORD)


def _make_doctor(db_session: Session, password_hash: str, name: str, email: str) -> User:
    user = User(
        email=email,
        name=name,
        role=UserRole.DOCTOR.value,
        password_hash=password_hash
    )
    db_session.add(user)
    db_session.flush()

    db_session.add(Doctor(
        id=user.id,
        name=name,
        email=email,
        specialization="Internal Medicine",
        license_number=f"SIP-{email.split('@')[0]}",
        hospital="General Hospital",
        experience=8
    ))
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def operator_user(db_session: Session, password_hash: str) -> User:
    """Create and return an operator account"""
    user = User(
        email="operator@example.com",
        name="Olivia Operator",
        role=UserRole.OPERATOR.value,
        password_hash=password_hash
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def doctor_user(db_session: Session, password_hash: str) -> User:
    """Create a doctor account with profile"""
    return _make_doctor(db_session, password_hash, "Dr. Anna Lestari", "anna@example.com")


@pytest.fixture
def other_doctor_user(db_session: Session, password_hash: str) -> User:
    """A second doctor, used to check visibility boundaries"""
    return _make_doctor(db_session, password_hash, "Dr. Bram Kusuma", "bram@example.com")


def _auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(subject=user.id, role=user.role)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def operator_headers(operator_user: User) -> Dict[str, str]:
    return _auth_headers(operator_user)


@pytest.fixture
def doctor_headers(doctor_user: User) -> Dict[str, str]:
    return _auth_headers(doctor_user)


@pytest.fixture
def other_doctor_headers(other_doctor_user: User) -> Dict[str, str]:
    return _auth_headers(other_doctor_user)


# ==================== SAMPLE DATA FIXTURES ====================

@pytest.fixture
def sample_patient_data(doctor_user: User) -> Dict[str, Any]:
    """Sample patient data assigned to doctor_user"""
    return {
        "name": "Budi Santoso",
        "age": 58,
        "gender": "male",
        "email": "budi@example.com",
        "phone": "+62811222333",
        "condition": "Hypertension",
        "allergies": ["Penicillin"],
        "doctor_id": doctor_user.id
    }


@pytest.fixture
def test_patient(db_session: Session, sample_patient_data: Dict) -> Patient:
    """Create and return a patient of doctor_user"""
    patient = Patient(**sample_patient_data)
    db_session.add(patient)
    db_session.commit()
    db_session.refresh(patient)
    return patient


@pytest.fixture
def other_patient(db_session: Session, other_doctor_user: User) -> Patient:
    """Create and return a patient of other_doctor_user"""
    patient = Patient(
        name="Citra Dewi",
        age=41,
        gender="female",
        condition="Type 2 Diabetes",
        allergies=[],
        doctor_id=other_doctor_user.id
    )
    db_session.add(patient)
    db_session.commit()
    db_session.refresh(patient)
    return patient


@pytest.fixture
def schedule_payload(test_patient: Patient) -> Dict[str, Any]:
    """Request body for a three-day, twice-daily schedule"""
    today = date.today()
    return {
        "patient_id": test_patient.id,
        "medication_name": "Amlodipine",
        "dosage": "5mg",
        "frequency": "2x daily",
        "times": ["08:00", "20:00"],
        "start_date": (today - timedelta(days=1)).isoformat(),
        "end_date": (today + timedelta(days=1)).isoformat(),
        "instructions": "After meals",
        "is_active": True
    }


def _make_schedule(db_session: Session, patient: Patient, prescriber: User, **overrides) -> MedicationSchedule:
    from services.schedule_service import schedule_service

    today = date.today()
    fields = {
        "patient_id": patient.id,
        "patient_name": patient.name,
        "medication_name": "Amlodipine",
        "dosage": "5mg",
        "frequency": "2x daily",
        "times": ["08:00", "20:00"],
        "start_date": today - timedelta(days=1),
        "end_date": today + timedelta(days=1),
        "prescribed_by": prescriber.id,
        "prescribed_by_name": prescriber.name,
        "is_active": True,
    }
    fields.update(overrides)

    schedule = MedicationSchedule(**fields)
    db_session.add(schedule)
    db_session.commit()
    if schedule.is_active:
        schedule_service.generate_records(db_session, schedule)
    db_session.refresh(schedule)
    return schedule


@pytest.fixture
def test_schedule(db_session: Session, test_patient: Patient, doctor_user: User) -> MedicationSchedule:
    """Active schedule of test_patient with its six consumption records"""
    return _make_schedule(db_session, test_patient, doctor_user)


@pytest.fixture
def other_schedule(db_session: Session, other_patient: Patient, other_doctor_user: User) -> MedicationSchedule:
    """Active schedule of other_patient"""
    return _make_schedule(
        db_session, other_patient, other_doctor_user,
        medication_name="Metformin", dosage="500mg", times=["07:00"]
    )


# ==================== MARKERS ====================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "api: mark test as an API test")
    config.addinivalue_line("markers", "database: mark test as requiring database")
