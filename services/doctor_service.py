"""
Doctor Service
Business logic for doctor accounts and profiles
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
from services.auth_service import auth_service
from tools.change_feed import change_feed


logger = logging.getLogger(__name__)


PROFILE_FIELDS = {
    "name", "email", "specialization", "license_number",
    "phone", "address", "hospital", "experience"
}


class DoctorService:
    """
    Service for doctor management. A doctor is a User with role doctor
    plus a Doctor profile sharing the same id.
    """

    async def create_doctor(
        self,
        name: str,
        email: str,
        password: str,
        specialization: str,
        license_number: str,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        hospital: Optional[str] = None,
        experience: int = 0,
        db: Optional[Session] = None
    ) -> models.Doctor:
        """
        Create a doctor account and profile

        Raises:
            ValueError: if the email is already registered
        """
        def _create(session: Session) -> models.Doctor:
            user = auth_service.create_user_sync(
                session,
                email=email,
                name=name,
                password=password,
                role=models.UserRole.DOCTOR
            )

            doctor = models.Doctor(
                id=user.id,
                name=name,
                email=user.email,
                specialization=specialization,
                license_number=license_number,
                phone=phone,
                address=address,
                hospital=hospital,
                experience=experience or 0
            )
            session.add(doctor)
            session.commit()
            session.refresh(doctor)

            logger.info(f"Created doctor {doctor.id} ({doctor.email})")
            change_feed.publish(CollectionNames.DOCTORS, "create", doctor.id)
            return doctor

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    async def get_doctor(
        self,
        doctor_id: str,
        db: Optional[Session] = None
    ) -> Optional[models.Doctor]:
        """Get doctor by ID"""
        def _get(session: Session) -> Optional[models.Doctor]:
            return session.query(models.Doctor).filter(
                models.Doctor.id == doctor_id
            ).first()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def list_doctors(
        self,
        search: Optional[str] = None,
        specialization: Optional[str] = None,
        db: Optional[Session] = None
    ) -> List[models.Doctor]:
        """List doctors, newest first"""
        def _list(session: Session) -> List[models.Doctor]:
            query = session.query(models.Doctor)

            if search:
                pattern = f"%{search}%"
                query = query.filter(
                    or_(
                        models.Doctor.name.ilike(pattern),
                        models.Doctor.email.ilike(pattern),
                        models.Doctor.license_number.ilike(pattern)
                    )
                )

            if specialization:
                query = query.filter(models.Doctor.specialization == specialization)

            try:
                return query.order_by(models.Doctor.created_at.desc()).all()
            except SQLAlchemyError as e:
                logger.error(f"Error loading doctors: {e}")
                return []

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)

    async def update_doctor(
        self,
        doctor_id: str,
        updates: Dict[str, Any],
        db: Optional[Session] = None
    ) -> Optional[models.Doctor]:
        """Update a doctor profile and mirror name/email onto the user"""
        def _update(session: Session) -> Optional[models.Doctor]:
            doctor = session.query(models.Doctor).filter(
                models.Doctor.id == doctor_id
            ).first()

            if not doctor:
                return None

            changes = dict(updates)
            if changes.get("email"):
                changes["email"] = changes["email"].strip().lower()
                clash = session.query(models.User).filter(
                    models.User.email == changes["email"],
                    models.User.id != doctor_id
                ).first()
                if clash:
                    raise ValueError(f"User with email {changes['email']} already exists")

            for field, value in changes.items():
                if field in PROFILE_FIELDS:
                    setattr(doctor, field, value)

            user = session.query(models.User).filter(models.User.id == doctor_id).first()
            if user:
                user.name = doctor.name
                user.email = doctor.email
                user.updated_at = datetime.utcnow()

            doctor.updated_at = datetime.utcnow()
            session.commit()
            session.refresh(doctor)

            change_feed.publish(CollectionNames.DOCTORS, "update", doctor.id)
            return doctor

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def delete_doctor(
        self,
        doctor_id: str,
        db: Optional[Session] = None
    ) -> bool:
        """
        Delete a doctor profile and its user account

        Raises:
            ValueError: if patients are still assigned to the doctor
        """
        def _delete(session: Session) -> bool:
            doctor = session.query(models.Doctor).filter(
                models.Doctor.id == doctor_id
            ).first()

            if not doctor:
                return False

            assigned = session.query(models.Patient).filter(
                models.Patient.doctor_id == doctor_id
            ).count()
            if assigned:
                raise ValueError(
                    f"Doctor {doctor_id} still has {assigned} assigned patient(s)"
                )

            user = session.query(models.User).filter(models.User.id == doctor_id).first()
            session.delete(doctor)
            if user:
                session.delete(user)
            session.commit()

            logger.info(f"Deleted doctor {doctor_id} and user account")
            change_feed.publish(CollectionNames.DOCTORS, "delete", doctor_id)
            return True

        if db:
            return _delete(db)

        with get_db_context() as session:
            return _delete(session)


# Singleton instance
doctor_service = DoctorService()
