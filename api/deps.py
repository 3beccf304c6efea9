"""
API Dependencies
Common dependencies for FastAPI endpoints
"""

import logging
from typing import Generator, Optional, Sequence
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database import SessionLocal
import models
from models import UserRole


logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency
    Yields a SQLAlchemy session and ensures cleanup
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """
    Bearer token from the Authorization header
    Raises HTTPException if missing
    """
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_token),
    db: Session = Depends(get_db)
) -> models.User:
    """
    Resolve the session user
    Invalid, expired or revoked tokens answer 401
    """
    from services.auth_service import auth_service

    user = await auth_service.resolve_user(token, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


class RoleChecker:
    """
    Restrict an endpoint to a set of roles
    """

    def __init__(self, roles: Sequence[UserRole]):
        self.roles = {UserRole(r).value for r in roles}

    async def __call__(
        self,
        user: models.User = Depends(get_current_user)
    ) -> models.User:
        if user.role not in self.roles:
            logger.info(f"User {user.id} with role {user.role} denied (needs {sorted(self.roles)})")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions for this operation",
            )
        return user


# Role checker instances
require_operator = RoleChecker([UserRole.OPERATOR])
require_staff = RoleChecker([UserRole.OPERATOR, UserRole.DOCTOR])


class ServiceDependency:
    """
    Dependency injection for services
    """

    @staticmethod
    def get_auth_service():
        from services.auth_service import auth_service
        return auth_service

    @staticmethod
    def get_doctor_service():
        from services.doctor_service import doctor_service
        return doctor_service

    @staticmethod
    def get_patient_service():
        from services.patient_service import patient_service
        return patient_service

    @staticmethod
    def get_schedule_service():
        from services.schedule_service import schedule_service
        return schedule_service

    @staticmethod
    def get_consumption_service():
        from services.consumption_service import consumption_service
        return consumption_service

    @staticmethod
    def get_dashboard_service():
        from services.dashboard_service import dashboard_service
        return dashboard_service


# Service dependency instances
services = ServiceDependency()
