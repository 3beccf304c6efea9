"""
Auth API Router
Login, logout and the current user
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

import models
from api.deps import get_db, get_token, get_current_user, services
from api.schemas.auth import LoginRequest, TokenResponse, UserResponse, LogoutResponse


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Exchange email and password for a bearer token
    """
    auth_service = services.get_auth_service()

    result = await auth_service.login(credentials.email, credentials.password, db)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(
        access_token=result["access_token"],
        token_type=result["token_type"],
        expires_at=result["expires_at"],
        user=UserResponse.model_validate(result["user"])
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    token: str = Depends(get_token),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Revoke the current token
    """
    auth_service = services.get_auth_service()

    await auth_service.logout(token, db)
    return LogoutResponse(success=True, message="Logged out")


@router.get("/me", response_model=UserResponse)
async def me(user: models.User = Depends(get_current_user)):
    """
    Get the current user
    """
    return user
