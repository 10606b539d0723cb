# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from src.config import settings
from src.models import User, UserSession
from src.security import generate_session_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    full_name: str | None = None,
    role_id: uuid.UUID | None = None,
) -> User:
    """Create an active user, optionally with a role."""
    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        full_name=full_name,
        is_active=True,
        role_id=role_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created user {username}")
    return user


def authenticate(db: Session, username: str, password: str) -> User | None:
    """Authenticate a user by username and password."""
    user = get_user_by_username(db, username)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    if not user.is_active:
        return None
    return user


def create_session(db: Session, user_id: uuid.UUID) -> str:
    """Create a new session for a user and return its token."""
    token = generate_session_token()
    session = UserSession(
        user_id=user_id,
        token=token,
        expires_at=datetime.utcnow() + timedelta(days=settings.SESSION_EXPIRY_DAYS),
    )
    db.add(session)
    db.commit()
    return token


def get_session(db: Session, token: str) -> UserSession | None:
    """Get a valid session by token. Expired sessions are removed."""
    session = db.query(UserSession).filter(UserSession.token == token).first()
    if not session:
        return None
    if session.is_expired:
        db.delete(session)
        db.commit()
        return None
    return session


def delete_session(db: Session, token: str) -> bool:
    session = db.query(UserSession).filter(UserSession.token == token).first()
    if not session:
        return False
    db.delete(session)
    db.commit()
    return True


def get_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def cleanup_expired_sessions(db: Session) -> int:
    """Delete all expired sessions. Returns count of deleted sessions."""
    count = (
        db.query(UserSession)
        .filter(UserSession.expires_at < datetime.utcnow())
        .delete()
    )
    db.commit()
    return count
