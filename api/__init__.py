"""
API Module
FastAPI routers for the MedTrack application
"""

from api.auth import router as auth_router
from api.doctors import router as doctors_router
from api.patients import router as patients_router
from api.schedules import router as schedules_router
from api.records import router as records_router
from api.dashboard import router as dashboard_router
from api.live import router as live_router

from api.deps import (
    get_db,
    get_current_user,
    RoleChecker,
    require_operator,
    require_staff,
    services,
)


__all__ = [
    # Routers
    "auth_router",
    "doctors_router",
    "patients_router",
    "schedules_router",
    "records_router",
    "dashboard_router",
    "live_router",
    # Dependencies
    "get_db",
    "get_current_user",
    "RoleChecker",
    "require_operator",
    "require_staff",
    "services",
]


def include_routers(app):
    """
    Include all API routers in the FastAPI app

    Usage:
        from api import include_routers
        include_routers(app)
    """
    from config import settings

    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(doctors_router, prefix=settings.API_PREFIX)
    app.include_router(patients_router, prefix=settings.API_PREFIX)
    app.include_router(schedules_router, prefix=settings.API_PREFIX)
    app.include_router(records_router, prefix=settings.API_PREFIX)
    app.include_router(dashboard_router, prefix=settings.API_PREFIX)
    app.include_router(live_router, prefix=settings.API_PREFIX)
