"""
Patient Service
Business logic for patient management
"""

import logging
from typing import Dict, List, Optional, Any
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from database import get_db_context
from config import CollectionNames
import models
from services import access
from tools.change_feed import change_feed


logger = logging.getLogger(__name__)


PATIENT_FIELDS = {
    "user_id", "name", "age", "gender", "email", "phone", "condition",
    "doctor_id", "allergies", "emergency_contact", "address"
}


def normalize_allergies(value: Any) -> List[str]:
    """Accept a list or a comma separated string"""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [a.strip() for a in value if a and a.strip()]


class PatientService:
    """
    Service for patient-related operations
    """

    def _require_doctor(self, session: Session, doctor_id: str) -> models.Doctor:
        doctor = session.query(models.Doctor).filter(models.Doctor.id == doctor_id).first()
        if not doctor:
            raise ValueError(f"Doctor {doctor_id} not found")
        return doctor

    async def create_patient(
        self,
        data: Dict[str, Any],
        db: Optional[Session] = None
    ) -> models.Patient:
        """
        Create a new patient record

        Args:
            data: Patient fields; doctor_id must reference an existing doctor
            db: Database session (optional)

        Returns:
            Created Patient object
        """
        def _create(session: Session) -> models.Patient:
            self._require_doctor(session, data.get("doctor_id"))

            fields = {k: v for k, v in data.items() if k in PATIENT_FIELDS}
            fields["allergies"] = normalize_allergies(fields.get("allergies"))

            patient = models.Patient(**fields)
            session.add(patient)
            session.commit()
            session.refresh(patient)

            logger.info(f"Created patient {patient.id} assigned to doctor {patient.doctor_id}")
            change_feed.publish(CollectionNames.PATIENTS, "create", patient.id)
            return patient

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    async def get_patient(
        self,
        patient_id: str,
        user: models.User,
        db: Optional[Session] = None
    ) -> Optional[models.Patient]:
        """Get a patient visible to the user"""
        def _get(session: Session) -> Optional[models.Patient]:
            return access.get_visible_patient(session, user, patient_id)

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def list_patients(
        self,
        user: models.User,
        search: Optional[str] = None,
        gender: Optional[str] = None,
        doctor_id: Optional[str] = None,
        limit: Optional[int] = None,
        db: Optional[Session] = None
    ) -> List[models.Patient]:
        """
        List patients visible to the user, newest first

        Read failures are logged and yield an empty list.
        """
        def _list(session: Session) -> List[models.Patient]:
            query = access.scope_patients(session.query(models.Patient), user)

            if search:
                pattern = f"%{search}%"
                query = query.filter(
                    or_(
                        models.Patient.name.ilike(pattern),
                        models.Patient.email.ilike(pattern),
                        models.Patient.condition.ilike(pattern)
                    )
                )
            if gender:
                query = query.filter(models.Patient.gender == gender)
            if doctor_id:
                query = query.filter(models.Patient.doctor_id == doctor_id)

            query = query.order_by(models.Patient.created_at.desc())
            if limit:
                query = query.limit(limit)

            try:
                return query.all()
            except SQLAlchemyError as e:
                logger.error(f"Error loading patients for user {user.id}: {e}")
                return []

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)

    async def update_patient(
        self,
        patient_id: str,
        updates: Dict[str, Any],
        db: Optional[Session] = None
    ) -> Optional[models.Patient]:
        """Update patient fields"""
        def _update(session: Session) -> Optional[models.Patient]:
            patient = session.query(models.Patient).filter(
                models.Patient.id == patient_id
            ).first()

            if not patient:
                return None

            if updates.get("doctor_id"):
                self._require_doctor(session, updates["doctor_id"])

            for field, value in updates.items():
                if field not in PATIENT_FIELDS:
                    continue
                if field == "allergies":
                    value = normalize_allergies(value)
                setattr(patient, field, value)

            # Keep denormalized names in step
            if "name" in updates:
                session.query(models.MedicationSchedule).filter(
                    models.MedicationSchedule.patient_id == patient_id
                ).update({"patient_name": patient.name}, synchronize_session=False)
                session.query(models.ConsumptionRecord).filter(
                    models.ConsumptionRecord.patient_id == patient_id
                ).update({"patient_name": patient.name}, synchronize_session=False)

            patient.updated_at = datetime.utcnow()
            session.commit()
            session.refresh(patient)

            change_feed.publish(CollectionNames.PATIENTS, "update", patient.id)
            return patient

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def delete_patient(
        self,
        patient_id: str,
        db: Optional[Session] = None
    ) -> bool:
        """Delete a patient along with their schedules and consumption records"""
        def _delete(session: Session) -> bool:
            patient = session.query(models.Patient).filter(
                models.Patient.id == patient_id
            ).first()

            if not patient:
                return False

            schedule_count = len(patient.schedules)
            session.delete(patient)
            session.commit()

            logger.info(f"Deleted patient {patient_id} and {schedule_count} schedule(s)")
            change_feed.publish(CollectionNames.PATIENTS, "delete", patient_id)
            if schedule_count:
                change_feed.publish(CollectionNames.MEDICATION_SCHEDULES, "delete")
                change_feed.publish(CollectionNames.CONSUMPTION_RECORDS, "delete")
            return True

        if db:
            return _delete(db)

        with get_db_context() as session:
            return _delete(session)


# Singleton instance
patient_service = PatientService()
