#!/usr/bin/env python
"""
Seed Data
Bootstrap the first operator account and, optionally, demo data for
development and testing
"""

import sys
import os
import argparse
import logging
import random
from datetime import date, datetime, timedelta

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import SessionLocal, init_db
from models import (
    User, Doctor, Patient, MedicationSchedule, ConsumptionRecord,
    UserRole, ConsumptionStatus, TIMED_STATUSES
)
from services.auth_service import auth_service
from services.schedule_service import schedule_service


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEMO_DOCTOR_EMAIL = "doctor@medtrack.local"
DEMO_DOCTOR_PASSWORD = "doctor123"


def seed_operator(db, email: str, password: str, name: str) -> User:
    """Create the operator account unless it exists"""
    existing = db.query(User).filter(User.email == email.lower()).first()
    if existing:
        logger.info(f"Operator {email} already exists")
        return existing

    user = auth_service.create_user_sync(
        db,
        email=email,
        name=name,
        password=password,
        role=UserRole.OPERATOR
    )
    db.commit()
    logger.info(f"Created operator {user.email} (ID: {user.id})")
    return user


def seed_demo_doctor(db) -> Doctor:
    """Create a demo doctor account with profile"""
    existing = db.query(Doctor).filter(Doctor.email == DEMO_DOCTOR_EMAIL).first()
    if existing:
        logger.info("Demo doctor already exists")
        return existing

    user = auth_service.create_user_sync(
        db,
        email=DEMO_DOCTOR_EMAIL,
        name="Dr. Sari Wijaya",
        password=DEMO_DOCTOR_PASSWORD,
        role=UserRole.DOCTOR
    )
    doctor = Doctor(
        id=user.id,
        name=user.name,
        email=user.email,
        specialization="Internal Medicine",
        license_number="SIP-001/2024",
        phone="+62811000111",
        hospital="RS Demo",
        experience=12
    )
    db.add(doctor)
    db.commit()
    logger.info(f"Created doctor {doctor.name} (ID: {doctor.id})")
    return doctor


def seed_demo_patients(db, doctor: Doctor) -> list:
    """Add demo patients assigned to the doctor"""
    patients_data = [
        {"name": "Budi Santoso", "age": 58, "gender": "male", "condition": "Hypertension",
         "allergies": ["Penicillin"]},
        {"name": "Siti Rahma", "age": 47, "gender": "female", "condition": "Type 2 Diabetes",
         "allergies": []},
    ]

    patients = []
    for data in patients_data:
        patient = db.query(Patient).filter(Patient.name == data["name"]).first()
        if not patient:
            patient = Patient(doctor_id=doctor.id, **data)
            db.add(patient)
            db.flush()
            logger.info(f"Created patient {patient.name} (ID: {patient.id})")
        patients.append(patient)

    db.commit()
    return patients


def seed_demo_schedules(db, patients: list, doctor: Doctor, days: int = 30) -> list:
    """Create one schedule per patient, running from days ago to a week ahead"""
    medications = [
        ("Amlodipine", "5mg", ["08:00"]),
        ("Metformin", "500mg", ["07:00", "19:00"]),
    ]
    start = date.today() - timedelta(days=days)
    end = date.today() + timedelta(days=7)

    schedules = []
    for patient, (name, dosage, times) in zip(patients, medications):
        schedule = MedicationSchedule(
            patient_id=patient.id,
            patient_name=patient.name,
            medication_name=name,
            dosage=dosage,
            frequency=f"{len(times)}x daily",
            times=times,
            start_date=start,
            end_date=end,
            prescribed_by=doctor.id,
            prescribed_by_name=doctor.name,
            instructions="After meals",
            is_active=True
        )
        db.add(schedule)
        db.commit()

        counts = schedule_service.generate_records(db, schedule)
        logger.info(f"Schedule {name} for {patient.name}: {counts['created']} records")
        schedules.append(schedule)

    return schedules


def seed_consumption_history(db, schedules: list, taken_rate: float = 0.8):
    """Resolve past records with a realistic mix of outcomes"""
    now = datetime.now()
    resolved = 0

    for schedule in schedules:
        past = db.query(ConsumptionRecord).filter(
            ConsumptionRecord.schedule_id == schedule.id,
            ConsumptionRecord.scheduled_datetime < now
        ).all()

        for record in past:
            roll = random.random()
            if roll < taken_rate:
                status = ConsumptionStatus.TAKEN.value
            elif roll < taken_rate + 0.05:
                status = ConsumptionStatus.LATE.value
            else:
                status = ConsumptionStatus.MISSED.value

            record.status = status
            if status in TIMED_STATUSES:
                delay = random.randint(0, 90) if status == ConsumptionStatus.LATE.value else random.randint(-10, 15)
                record.actual_time = record.scheduled_datetime + timedelta(minutes=delay)
            resolved += 1

    db.commit()
    logger.info(f"Resolved {resolved} past consumption records")


def seed_all(email: str, password: str, name: str, demo: bool = False, days: int = 30):
    """Run all seed operations"""

    print("\n" + "=" * 60)
    print("Database Seeding")
    print("=" * 60)

    init_db()

    db = SessionLocal()

    try:
        operator = seed_operator(db, email, password, name)

        if demo:
            doctor = seed_demo_doctor(db)
            patients = seed_demo_patients(db, doctor)
            schedules = seed_demo_schedules(db, patients, doctor, days=days)
            seed_consumption_history(db, schedules)

        # Print summary
        print("\n" + "=" * 60)
        print("Seeding Complete!")
        print("=" * 60)
        print(f"\nDatabase Statistics:")
        print(f"  Users: {db.query(User).count()}")
        print(f"  Doctors: {db.query(Doctor).count()}")
        print(f"  Patients: {db.query(Patient).count()}")
        print(f"  Schedules: {db.query(MedicationSchedule).count()}")
        print(f"  Consumption Records: {db.query(ConsumptionRecord).count()}")

        print(f"\nOperator login: {operator.email}")
        if demo:
            print(f"Doctor login: {DEMO_DOCTOR_EMAIL} / {DEMO_DOCTOR_PASSWORD}")

    except Exception as e:
        db.rollback()
        logger.error(f"Error during seeding: {e}")
        raise
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(
        description="Create the operator account and optional demo data"
    )
    parser.add_argument("--email", default="operator@medtrack.local", help="Operator email")
    parser.add_argument("--password", default="operator123", help="Operator password")
    parser.add_argument("--name", default="Operator", help="Operator display name")
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Also create a demo doctor, patients, schedules and history"
    )
    parser.add_argument("--days", type=int, default=30, help="Days of demo history")

    args = parser.parse_args()

    seed_all(args.email, args.password, args.name, demo=args.demo, days=args.days)


if __name__ == "__main__":
    main()
