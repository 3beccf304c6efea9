"""
Auth Service
Session provider: login, logout and token resolution
"""

import logging
from typing import Dict, Optional, Any
from datetime import datetime
from sqlalchemy.orm import Session
from jose import JWTError

from database import get_db_context
import models
from security import (
    verify_password,
    get_password_hash,
    create_access_token,
    decode_access_token,
)


logger = logging.getLogger(__name__)


class AuthService:
    """
    Service for authentication and user accounts
    """

    def create_user_sync(
        self,
        session: Session,
        email: str,
        name: str,
        password: str,
        role: models.UserRole = models.UserRole.OPERATOR,
        user_id: Optional[str] = None
    ) -> models.User:
        """Add a user to the session without committing"""
        email = email.strip().lower()
        existing = session.query(models.User).filter(models.User.email == email).first()
        if existing:
            raise ValueError(f"User with email {email} already exists")

        user = models.User(
            email=email,
            name=name,
            role=models.UserRole(role).value,
            password_hash=get_password_hash(password)
        )
        if user_id:
            user.id = user_id

        session.add(user)
        session.flush()
        return user

    async def create_user(
        self,
        email: str,
        name: str,
        password: str,
        role: models.UserRole = models.UserRole.OPERATOR,
        db: Optional[Session] = None
    ) -> models.User:
        """
        Create a user account

        Args:
            email: Login email (unique, case-insensitive)
            name: Display name
            password: Plain password, stored as a bcrypt hash
            role: operator, doctor or patient
            db: Database session

        Returns:
            Created User object
        """
        def _create(session: Session) -> models.User:
            user = self.create_user_sync(session, email, name, password, role)
            session.commit()
            session.refresh(user)
            logger.info(f"Created {user.role} account {user.email}")
            return user

        if db:
            return _create(db)

        with get_db_context() as session:
            return _create(session)

    async def authenticate(
        self,
        email: str,
        password: str,
        db: Session
    ) -> Optional[models.User]:
        """Return the user when the credentials match"""
        user = db.query(models.User).filter(
            models.User.email == email.strip().lower()
        ).first()

        if not user or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {email}")
            return None

        return user

    async def login(
        self,
        email: str,
        password: str,
        db: Session
    ) -> Optional[Dict[str, Any]]:
        """
        Authenticate and issue an access token

        Returns:
            Token details with the user, or None on bad credentials
        """
        user = await self.authenticate(email, password, db)
        if not user:
            return None

        issued = create_access_token(subject=user.id, role=user.role)
        logger.info(f"User {user.id} ({user.role}) logged in")

        return {
            "access_token": issued["token"],
            "token_type": "bearer",
            "expires_at": issued["expires_at"],
            "user": user,
        }

    async def logout(self, token: str, db: Session) -> bool:
        """Revoke a token so it no longer authenticates"""
        try:
            claims = decode_access_token(token)
        except JWTError:
            return False

        jti = claims.get("jti")
        if not jti:
            return False

        if not db.query(models.RevokedToken).filter(models.RevokedToken.jti == jti).first():
            exp = claims.get("exp")
            db.add(models.RevokedToken(
                jti=jti,
                user_id=claims.get("sub"),
                expires_at=datetime.utcfromtimestamp(exp) if exp else None
            ))
            db.commit()

        logger.info(f"User {claims.get('sub')} logged out")
        return True

    async def resolve_user(self, token: str, db: Session) -> Optional[models.User]:
        """
        Current user for a bearer token.

        Invalid, expired or revoked tokens and deleted users resolve to None.
        """
        try:
            claims = decode_access_token(token)
        except JWTError:
            return None

        jti = claims.get("jti")
        if jti and db.query(models.RevokedToken).filter(models.RevokedToken.jti == jti).first():
            return None

        user_id = claims.get("sub")
        if not user_id:
            return None

        return db.query(models.User).filter(models.User.id == user_id).first()


# Singleton instance
auth_service = AuthService()
