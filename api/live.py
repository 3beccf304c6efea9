"""
Live API Router
WebSocket subscriptions that push scoped collection snapshots on change
"""

import asyncio
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

import models
from config import settings, CollectionNames
from api.deps import get_db, services, require_staff
from api.schemas.doctor import DoctorResponse
from api.schemas.patient import PatientResponse
from api.schemas.schedule import ScheduleResponse
from api.schemas.record import RecordResponse
from services import access
from tools.change_feed import change_feed


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/live", tags=["live"])


LIVE_COLLECTIONS = {
    CollectionNames.DOCTORS: (models.Doctor, DoctorResponse),
    CollectionNames.PATIENTS: (models.Patient, PatientResponse),
    CollectionNames.MEDICATION_SCHEDULES: (models.MedicationSchedule, ScheduleResponse),
    CollectionNames.CONSUMPTION_RECORDS: (models.ConsumptionRecord, RecordResponse),
}


def build_snapshot(session: Session, user: models.User, collection: str) -> Dict[str, Any]:
    """Newest documents of a collection within the user's scope"""
    model, schema = LIVE_COLLECTIONS[collection]

    # Pick up commits made by other sessions
    session.expire_all()

    query = session.query(model)
    if model is models.Patient:
        query = access.scope_patients(query, user)
    elif model is models.MedicationSchedule:
        query = access.scope_schedules(query, session, user)
    elif model is models.ConsumptionRecord:
        query = access.scope_records(query, session, user)

    try:
        rows = query.order_by(model.created_at.desc()).limit(settings.LIVE_QUERY_LIMIT).all()
    except SQLAlchemyError as e:
        logger.error(f"Error loading live snapshot of {collection} for user {user.id}: {e}")
        rows = []

    return {
        "collection": collection,
        "action": "snapshot",
        "documents": [schema.model_validate(row).model_dump(mode="json") for row in rows],
    }


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Incoming client messages are ignored
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket("/{collection}")
async def live_collection(
    websocket: WebSocket,
    collection: str,
    token: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """
    Subscribe to a collection.

    Sends a snapshot on connect and a fresh one after every change.
    Unknown collections and invalid tokens close with 1008.
    """
    auth_service = services.get_auth_service()

    user = await auth_service.resolve_user(token, db) if token else None
    if (
        collection not in LIVE_COLLECTIONS
        or not user
        or user.role not in require_staff.roles
    ):
        logger.info(f"Rejected live subscription to {collection}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    subscription = change_feed.subscribe(collection)
    disconnect = asyncio.create_task(_wait_for_disconnect(websocket))
    logger.info(f"User {user.id} subscribed to {collection}")

    try:
        await websocket.send_json(build_snapshot(db, user, collection))

        while True:
            next_event = asyncio.create_task(subscription.get())
            done, _ = await asyncio.wait(
                {next_event, disconnect},
                return_when=asyncio.FIRST_COMPLETED
            )
            if disconnect in done:
                next_event.cancel()
                break

            event = next_event.result()
            snapshot = build_snapshot(db, user, collection)
            snapshot["event"] = {"action": event.action, "document_id": event.document_id}
            await websocket.send_json(snapshot)
    except WebSocketDisconnect:
        pass
    finally:
        disconnect.cancel()
        change_feed.unsubscribe(subscription)
        logger.info(f"User {user.id} unsubscribed from {collection}")
