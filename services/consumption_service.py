"""
Consumption Service
Business logic for consumption records: listing, status updates and
generation of upcoming doses
"""

import logging
from typing import Dict, List, Optional, Any
from datetime import datetime, date
from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from database import get_db_context
from config import settings, CollectionNames
import models
from models import ConsumptionStatus, TIMED_STATUSES
from services import access
from tools.change_feed import change_feed
from tools.compliance import summarize, ComplianceSummary
from tools.schedule_expander import upcoming_slots, build_record_payload


logger = logging.getLogger(__name__)


class ConsumptionService:
    """
    Service for consumption record tracking
    """

    def _filtered_query(
        self,
        session: Session,
        user: models.User,
        status: Optional[str] = None,
        patient_id: Optional[str] = None,
        scheduled_date: Optional[date] = None,
        search: Optional[str] = None
    ):
        query = access.scope_records(session.query(models.ConsumptionRecord), session, user)

        if status:
            query = query.filter(models.ConsumptionRecord.status == status)
        if patient_id:
            query = query.filter(models.ConsumptionRecord.patient_id == patient_id)
        if scheduled_date:
            query = query.filter(models.ConsumptionRecord.scheduled_date == scheduled_date)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    models.ConsumptionRecord.patient_name.ilike(pattern),
                    models.ConsumptionRecord.medication_name.ilike(pattern)
                )
            )

        return query.order_by(
            models.ConsumptionRecord.created_at.desc(),
            models.ConsumptionRecord.scheduled_datetime.desc()
        )

    async def list_records(
        self,
        user: models.User,
        status: Optional[str] = None,
        patient_id: Optional[str] = None,
        scheduled_date: Optional[date] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        db: Optional[Session] = None
    ) -> List[models.ConsumptionRecord]:
        """
        List consumption records visible to the user, newest first

        Args:
            user: Current user
            status: pending, taken, missed or late
            patient_id: Restrict to one patient
            scheduled_date: Restrict to one calendar day
            search: Substring of patient or medication name
            limit: Cap on returned records (defaults to RECORD_QUERY_LIMIT)
            db: Database session

        Returns:
            List of ConsumptionRecord objects, empty on read failure
        """
        def _list(session: Session) -> List[models.ConsumptionRecord]:
            query = self._filtered_query(session, user, status, patient_id, scheduled_date, search)
            try:
                return query.limit(limit or settings.RECORD_QUERY_LIMIT).all()
            except SQLAlchemyError as e:
                logger.error(f"Error loading consumption records for user {user.id}: {e}")
                return []

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)

    async def record_stats(
        self,
        user: models.User,
        status: Optional[str] = None,
        patient_id: Optional[str] = None,
        scheduled_date: Optional[date] = None,
        search: Optional[str] = None,
        db: Optional[Session] = None
    ) -> ComplianceSummary:
        """Status counts and compliance rate over the filtered record list"""
        records = await self.list_records(
            user,
            status=status,
            patient_id=patient_id,
            scheduled_date=scheduled_date,
            search=search,
            db=db
        )
        return summarize(records)

    async def get_record(
        self,
        record_id: str,
        user: models.User,
        db: Optional[Session] = None
    ) -> Optional[models.ConsumptionRecord]:
        """Get a record visible to the user"""
        def _get(session: Session) -> Optional[models.ConsumptionRecord]:
            query = session.query(models.ConsumptionRecord).filter(
                models.ConsumptionRecord.id == record_id
            )
            return access.scope_records(query, session, user).first()

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def update_record(
        self,
        record_id: str,
        user: models.User,
        status: Optional[ConsumptionStatus] = None,
        notes: Optional[str] = None,
        side_effects_reported: Optional[List[str]] = None,
        db: Optional[Session] = None
    ) -> Optional[models.ConsumptionRecord]:
        """
        Record the outcome of a dose.

        taken/late stamp actual_time with the current time, pending/missed
        clear it. recorded_by becomes the editing user.
        """
        def _update(session: Session) -> Optional[models.ConsumptionRecord]:
            query = session.query(models.ConsumptionRecord).filter(
                models.ConsumptionRecord.id == record_id
            )
            record = access.scope_records(query, session, user).first()

            if not record:
                return None

            if status is not None:
                new_status = ConsumptionStatus(status).value
                record.status = new_status
                record.actual_time = datetime.utcnow() if new_status in TIMED_STATUSES else None
            if notes is not None:
                record.notes = notes
            if side_effects_reported is not None:
                record.side_effects_reported = [s.strip() for s in side_effects_reported if s and s.strip()]

            record.recorded_by = user.id
            record.updated_at = datetime.utcnow()
            session.commit()
            session.refresh(record)

            logger.info(f"Record {record.id} marked {record.status} by {user.id}")
            change_feed.publish(CollectionNames.CONSUMPTION_RECORDS, "update", record.id)
            return record

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def generate_upcoming(
        self,
        user: models.User,
        today: Optional[date] = None,
        days: Optional[int] = None,
        db: Optional[Session] = None
    ) -> Dict[str, int]:
        """
        Create missing pending records for today and the following days.

        Only active schedules whose date range covers today are considered:
        all of them for operators, those the user prescribed otherwise.
        Slots that already have a record are skipped.

        Returns:
            Dict with schedules considered and records created

        Raises:
            ValueError: if there is no active schedule to generate from
        """
        today = today or date.today()
        days = days or settings.UPCOMING_GENERATION_DAYS

        def _generate(session: Session) -> Dict[str, int]:
            query = session.query(models.MedicationSchedule).filter(
                models.MedicationSchedule.is_active == True,
                models.MedicationSchedule.start_date <= today,
                models.MedicationSchedule.end_date >= today
            )
            if not access.is_operator(user):
                query = query.filter(models.MedicationSchedule.prescribed_by == user.id)

            schedules = query.all()
            if not schedules:
                raise ValueError("No active schedules to generate consumption records from")

            created = 0
            for schedule in schedules:
                existing = {
                    (row.scheduled_date, row.scheduled_time)
                    for row in session.query(
                        models.ConsumptionRecord.scheduled_date,
                        models.ConsumptionRecord.scheduled_time
                    ).filter(models.ConsumptionRecord.schedule_id == schedule.id)
                }

                for slot in upcoming_slots(schedule, today, days):
                    if (slot.scheduled_date, slot.scheduled_time) in existing:
                        continue
                    session.add(models.ConsumptionRecord(**build_record_payload(schedule, slot)))
                    existing.add((slot.scheduled_date, slot.scheduled_time))
                    created += 1

            session.commit()

            logger.info(
                f"Generated {created} upcoming consumption records from "
                f"{len(schedules)} active schedules for {user.id}"
            )
            if created:
                change_feed.publish(CollectionNames.CONSUMPTION_RECORDS, "create")
            return {"schedules": len(schedules), "records_created": created}

        if db:
            return _generate(db)

        with get_db_context() as session:
            return _generate(session)


# Singleton instance
consumption_service = ConsumptionService()
