"""
Schedule Service
Business logic for medication schedules and their consumption records
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
from tools.schedule_expander import expand_schedule


logger = logging.getLogger(__name__)


SCHEDULE_FIELDS = {
    "medication_name", "dosage", "frequency", "times", "start_date",
    "end_date", "instructions", "notes", "is_active"
}


def schedule_snapshot(schedule: models.MedicationSchedule) -> Dict[str, Any]:
    """Plain field dict of a schedule, used for webhooks and change comparison"""
    return {
        "id": schedule.id,
        "patient_id": schedule.patient_id,
        "patient_name": schedule.patient_name,
        "medication_name": schedule.medication_name,
        "dosage": schedule.dosage,
        "frequency": schedule.frequency,
        "times": list(schedule.times or []),
        "start_date": schedule.start_date,
        "end_date": schedule.end_date,
        "prescribed_by": schedule.prescribed_by,
        "prescribed_by_name": schedule.prescribed_by_name,
        "instructions": schedule.instructions,
        "notes": schedule.notes,
        "is_active": schedule.is_active,
        "created_at": schedule.created_at,
    }


class ScheduleService:
    """
    Service for medication schedule management
    """

    def generate_records(
        self,
        session: Session,
        schedule: models.MedicationSchedule,
        replace: bool = False
    ) -> Dict[str, int]:
        """
        Expand a schedule into pending consumption records.

        With replace=True every existing record of the schedule is deleted
        first, in the same transaction. Failures are logged and rolled back;
        the caller carries on with zero records created.

        Returns:
            Counts of records created and deleted
        """
        result = {"created": 0, "deleted": 0}

        try:
            if replace:
                result["deleted"] = session.query(models.ConsumptionRecord).filter(
                    models.ConsumptionRecord.schedule_id == schedule.id
                ).delete(synchronize_session=False)

            payloads = expand_schedule(schedule)
            session.add_all(models.ConsumptionRecord(**p) for p in payloads)
            session.commit()
            result["created"] = len(payloads)
        except Exception as e:
            session.rollback()
            logger.exception(f"Error generating consumption records for schedule {schedule.id}: {e}")
            return {"created": 0, "deleted": 0}

        logger.info(
            f"Generated {result['created']} consumption records for schedule {schedule.id} "
            f"({schedule.duration_days} days x {len(schedule.times or [])} times, "
            f"{result['deleted']} replaced)"
        )
        if result["created"] or result["deleted"]:
            change_feed.publish(CollectionNames.CONSUMPTION_RECORDS, "create", schedule.id)
        return result

    def _delete_records(
        self,
        session: Session,
        schedule_id: str,
        pending_only: bool = False
    ) -> int:
        query = session.query(models.ConsumptionRecord).filter(
            models.ConsumptionRecord.schedule_id == schedule_id
        )
        if pending_only:
            query = query.filter(
                models.ConsumptionRecord.status == models.ConsumptionStatus.PENDING.value
            )
        return query.delete(synchronize_session=False)

    async def create_schedule(
        self,
        data: Dict[str, Any],
        user: models.User,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Create a medication schedule and expand its consumption records

        Args:
            data: Schedule fields including patient_id
            user: Prescribing user (operator or doctor)
            db: Database session

        Returns:
            Dict with the schedule and the number of records created

        Raises:
            ValueError: if the patient does not exist or is out of the user's scope
        """
        def _create(session: Session) -> Dict[str, Any]:
            patient = access.get_visible_patient(session, user, data.get("patient_id"))
            if not patient:
                raise ValueError(f"Patient {data.get('patient_id')} not found")

            fields = {k: v for k, v in data.items() if k in SCHEDULE_FIELDS}
            schedule = models.MedicationSchedule(
                patient_id=patient.id,
                patient_name=patient.name,
                prescribed_by=user.id,
                prescribed_by_name=user.name,
                **fields
            )

            session.add(schedule)
            session.commit()
            session.refresh(schedule)

            logger.info(
                f"Created schedule {schedule.id} ({schedule.medication_name}) "
                f"for patient {patient.id} by {user.role} {user.id}"
            )
            change_feed.publish(CollectionNames.MEDICATION_SCHEDULES, "create", schedule.id)

            created = 0
            if schedule.is_active:
                created = self.generate_records(session, schedule)["created"]

            return {"schedule": schedule, "records_created": created, "records_deleted": 0}

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    async def get_schedule(
        self,
        schedule_id: str,
        user: models.User,
        db: Optional[Session] = None
    ) -> Optional[models.MedicationSchedule]:
        """Get a schedule visible to the user"""
        def _get(session: Session) -> Optional[models.MedicationSchedule]:
            query = session.query(models.MedicationSchedule).filter(
                models.MedicationSchedule.id == schedule_id
            )
            return access.scope_schedules(query, session, user).first()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def list_schedules(
        self,
        user: models.User,
        search: Optional[str] = None,
        patient_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        db: Optional[Session] = None
    ) -> List[models.MedicationSchedule]:
        """
        List schedules of the user's patients, newest first

        Args:
            status: "active" or "inactive"
        """
        def _list(session: Session) -> List[models.MedicationSchedule]:
            query = access.scope_schedules(
                session.query(models.MedicationSchedule), session, user
            )

            if search:
                pattern = f"%{search}%"
                query = query.filter(
                    or_(
                        models.MedicationSchedule.patient_name.ilike(pattern),
                        models.MedicationSchedule.medication_name.ilike(pattern),
                        models.MedicationSchedule.dosage.ilike(pattern)
                    )
                )
            if patient_id:
                query = query.filter(models.MedicationSchedule.patient_id == patient_id)
            if status == "active":
                query = query.filter(models.MedicationSchedule.is_active == True)
            elif status == "inactive":
                query = query.filter(models.MedicationSchedule.is_active == False)

            query = query.order_by(models.MedicationSchedule.created_at.desc())
            if limit:
                query = query.limit(limit)

            try:
                return query.all()
            except SQLAlchemyError as e:
                logger.error(f"Error loading schedules for user {user.id}: {e}")
                return []

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)

    async def update_schedule(
        self,
        schedule_id: str,
        updates: Dict[str, Any],
        user: models.User,
        db: Optional[Session] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Update a schedule and reconcile its consumption records.

        - Active after the update and (reactivated, times changed or date
          range changed): all records are deleted and regenerated.
        - Deactivated: pending records are deleted, resolved ones kept.

        Returns:
            Dict with the schedule and record counts, or None if not found
        """
        def _update(session: Session) -> Optional[Dict[str, Any]]:
            query = session.query(models.MedicationSchedule).filter(
                models.MedicationSchedule.id == schedule_id
            )
            schedule = access.scope_schedules(query, session, user).first()

            if not schedule:
                return None

            previous = schedule_snapshot(schedule)

            for field, value in updates.items():
                if field in SCHEDULE_FIELDS:
                    setattr(schedule, field, value)

            if schedule.end_date < schedule.start_date:
                session.rollback()
                raise ValueError("end_date must not be before start_date")
            if schedule.is_active and not schedule.times:
                session.rollback()
                raise ValueError("An active schedule needs at least one time of day")

            schedule.updated_at = datetime.utcnow()
            session.commit()
            session.refresh(schedule)

            change_feed.publish(CollectionNames.MEDICATION_SCHEDULES, "update", schedule.id)

            result = {"schedule": schedule, "records_created": 0, "records_deleted": 0}

            reactivated = schedule.is_active and not previous["is_active"]
            times_changed = list(schedule.times or []) != previous["times"]
            range_changed = (
                schedule.start_date != previous["start_date"]
                or schedule.end_date != previous["end_date"]
            )

            if schedule.is_active and (reactivated or times_changed or range_changed):
                counts = self.generate_records(session, schedule, replace=True)
                result["records_created"] = counts["created"]
                result["records_deleted"] = counts["deleted"]
            elif not schedule.is_active and previous["is_active"]:
                deleted = self._delete_records(session, schedule.id, pending_only=True)
                session.commit()
                result["records_deleted"] = deleted
                logger.info(
                    f"Deleted {deleted} pending consumption records for deactivated schedule {schedule.id}"
                )
                if deleted:
                    change_feed.publish(CollectionNames.CONSUMPTION_RECORDS, "delete", schedule.id)

            return result

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def delete_schedule(
        self,
        schedule_id: str,
        user: models.User,
        db: Optional[Session] = None
    ) -> Optional[int]:
        """
        Delete a schedule and all of its consumption records

        Returns:
            Number of records deleted, or None if the schedule was not found
        """
        def _delete(session: Session) -> Optional[int]:
            query = session.query(models.MedicationSchedule).filter(
                models.MedicationSchedule.id == schedule_id
            )
            schedule = access.scope_schedules(query, session, user).first()

            if not schedule:
                return None

            deleted = self._delete_records(session, schedule.id)
            session.expire(schedule, ["consumption_records"])
            session.delete(schedule)
            session.commit()

            logger.info(f"Deleted schedule {schedule_id} and {deleted} consumption records")
            change_feed.publish(CollectionNames.MEDICATION_SCHEDULES, "delete", schedule_id)
            if deleted:
                change_feed.publish(CollectionNames.CONSUMPTION_RECORDS, "delete", schedule_id)
            return deleted

        if db:
            return _delete(db)

        with get_db_context() as session:
            return _delete(session)


# Singleton instance
schedule_service = ScheduleService()
