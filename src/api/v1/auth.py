# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication API endpoints."""

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from src.api.deps import get_current_user, get_db
from src.config import settings
from src.models import User
from src.schemas.auth import AuthResponse, LoginRequest
from src.schemas.user import UserResponse
from src.services import auth_service, authorization_service

router = APIRouter()


def build_user_response(db: Session, user: User) -> UserResponse:
    """Build UserResponse with the user's effective permissions."""
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        full_name=user.full_name,
        is_active=user.is_active,
        role=user.role.name if user.role else None,
        permissions=authorization_service.get_user_permissions(db, user),
        created_at=user.created_at,
    )


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> AuthResponse:
    """Login with username and password."""
    user = auth_service.authenticate(db, data.username, data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    user_id = user.id
    token = auth_service.create_session(db, user_id)

    response.set_cookie(
        key="session",
        value=token,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        max_age=86400 * settings.SESSION_EXPIRY_DAYS,
    )

    # Re-query user after session creation commit to avoid expired object error
    user = auth_service.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="User not found after session creation",
        )

    return AuthResponse(user=build_user_response(db, user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    session: str | None = Cookie(default=None),
) -> None:
    """Logout current user and invalidate the session token."""
    if session:
        auth_service.delete_session(db, session)
    response.delete_cookie(key="session")


@router.get("/me", response_model=AuthResponse)
def get_current_user_info(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AuthResponse:
    """Get current authenticated user."""
    return AuthResponse(user=build_user_response(db, current_user))
