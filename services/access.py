"""
Access Scoping
Role-based visibility of patients, schedules and consumption records
"""

import logging
from typing import Optional, Set

from sqlalchemy import false
from sqlalchemy.orm import Session, Query

import models


logger = logging.getLogger(__name__)


def is_operator(user: models.User) -> bool:
    return user is not None and user.role == models.UserRole.OPERATOR.value


def scope_patients(query: Query, user: models.User) -> Query:
    """Operators see every patient, doctors only those assigned to them"""
    if is_operator(user):
        return query
    return query.filter(models.Patient.doctor_id == user.id)


def visible_patient_ids(session: Session, user: models.User) -> Optional[Set[str]]:
    """
    Ids of patients the user may see.

    Returns:
        None for unrestricted access, otherwise the (possibly empty) id set
    """
    if is_operator(user):
        return None

    rows = scope_patients(session.query(models.Patient.id), user).all()
    return {row[0] for row in rows}


def _restrict(query: Query, column, patient_ids: Optional[Set[str]]) -> Query:
    if patient_ids is None:
        return query
    if not patient_ids:
        return query.filter(false())
    return query.filter(column.in_(patient_ids))


def scope_schedules(query: Query, session: Session, user: models.User) -> Query:
    """Schedules of the user's visible patients"""
    return _restrict(query, models.MedicationSchedule.patient_id, visible_patient_ids(session, user))


def scope_records(query: Query, session: Session, user: models.User) -> Query:
    """Consumption records of the user's visible patients"""
    return _restrict(query, models.ConsumptionRecord.patient_id, visible_patient_ids(session, user))


def get_visible_patient(session: Session, user: models.User, patient_id: str) -> Optional[models.Patient]:
    """Patient by id, or None when missing or out of scope"""
    return scope_patients(
        session.query(models.Patient).filter(models.Patient.id == patient_id),
        user
    ).first()
