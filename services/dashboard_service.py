"""
Dashboard Service
Scoped compliance overview for the current user
"""

import logging
from typing import Dict, Optional, Any
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from database import get_db_context
from config import settings, tracking_config
import models
from models import ConsumptionStatus
from services import access
from tools.compliance import (
    summarize,
    daily_compliance,
    monthly_compliance,
    category_breakdown,
)


logger = logging.getLogger(__name__)


class DashboardService:
    """
    Builds the dashboard from the user's patients, schedules and the
    most recently created consumption records
    """

    async def get_dashboard(
        self,
        user: models.User,
        today: Optional[date] = None,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Aggregate the dashboard for a user

        Args:
            user: Current user (operator sees everything, doctor own patients)
            today: Reference day for the daily/monthly windows
            db: Database session

        Returns:
            Dict with stats, daily, monthly, categories and recent_activity
        """
        today = today or date.today()

        def _build(session: Session) -> Dict[str, Any]:
            try:
                patient_count = access.scope_patients(session.query(models.Patient), user).count()
                schedules = access.scope_schedules(
                    session.query(models.MedicationSchedule), session, user
                ).all()
                records = access.scope_records(
                    session.query(models.ConsumptionRecord), session, user
                ).order_by(
                    models.ConsumptionRecord.created_at.desc()
                ).limit(settings.DASHBOARD_RECORD_LIMIT).all()
            except SQLAlchemyError as e:
                logger.error(f"Error loading dashboard data for user {user.id}: {e}")
                patient_count, schedules, records = 0, [], []

            summary = summarize(records)
            today_records = [r for r in records if r.scheduled_date == today]

            stats = {
                "total_patients": patient_count,
                "total_schedules": len(schedules),
                "compliance_rate": summary.compliance_rate,
                "today_taken": sum(
                    1 for r in today_records if r.status == ConsumptionStatus.TAKEN.value
                ),
                "today_missed": sum(
                    1 for r in today_records if r.status == ConsumptionStatus.MISSED.value
                ),
            }

            logger.debug(
                f"Dashboard for {user.role} {user.id}: {patient_count} patients, "
                f"{len(schedules)} schedules, {len(records)} records"
            )

            return {
                "stats": stats,
                "summary": summary,
                "daily": daily_compliance(records, today, tracking_config.DAILY_WINDOW_DAYS),
                "monthly": monthly_compliance(records, today, tracking_config.MONTHLY_WINDOW_MONTHS),
                "categories": category_breakdown(schedules),
                "recent_activity": records[:tracking_config.RECENT_ACTIVITY_COUNT],
            }

        if db:
            return _build(db)

        with get_db_context() as session:
            return _build(session)


# Singleton instance
dashboard_service = DashboardService()
