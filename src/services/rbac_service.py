# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role store: roles and the single role each user holds."""

import logging
import uuid

from sqlalchemy.orm import Session

from src.models import PermissionRoleAssignRule, Role, User
from src.rbac.errors import AlreadyExistsError, NotFoundError, SystemRoleError

logger = logging.getLogger(__name__)


def get_role(db: Session, role_id: uuid.UUID) -> Role | None:
    return db.query(Role).filter(Role.id == role_id).first()


def get_role_by_name(db: Session, name: str) -> Role | None:
    """Get a role by its name."""
    return db.query(Role).filter(Role.name == name).first()


def list_roles(db: Session) -> list[Role]:
    return db.query(Role).order_by(Role.name).all()


def create_role(
    db: Session,
    name: str,
    description: str | None = None,
    is_system: bool = False,
) -> Role:
    """Create a new role. Role names are unique."""
    if get_role_by_name(db, name):
        raise AlreadyExistsError("Role", {"name": name})
    role = Role(name=name, description=description, is_system=is_system)
    db.add(role)
    db.commit()
    db.refresh(role)
    logger.info(f"Created role {name}")
    return role


def update_role(
    db: Session,
    role_id: uuid.UUID,
    name: str | None = None,
    description: str | None = None,
) -> Role:
    """Rename or re-describe a custom role. System roles are read-only."""
    role = get_role(db, role_id)
    if not role:
        raise NotFoundError("Role", role_id)
    if role.is_system:
        raise SystemRoleError(role.name, "modified")

    if name and name != role.name:
        if get_role_by_name(db, name):
            raise AlreadyExistsError("Role", {"name": name})
        role.name = name
    if description is not None:
        role.description = description

    db.commit()
    db.refresh(role)
    logger.info(f"Updated role {role.name}")
    return role


def delete_role(db: Session, role_id: uuid.UUID) -> None:
    """Delete a custom role with its grants and assignment rules.

    Users holding the role are left without one.
    """
    role = get_role(db, role_id)
    if not role:
        raise NotFoundError("Role", role_id)
    if role.is_system:
        raise SystemRoleError(role.name, "deleted")

    for user in list(role.users):
        user.role_id = None
    db.query(PermissionRoleAssignRule).filter(
        PermissionRoleAssignRule.role_id == role.id
    ).delete()
    name = role.name
    db.delete(role)
    db.commit()
    logger.info(f"Deleted role {name}")


def assign_role_to_user(db: Session, user_id: uuid.UUID, role_id: uuid.UUID) -> User:
    """Give a user a role, replacing whatever role they held before."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)
    role = get_role(db, role_id)
    if not role:
        raise NotFoundError("Role", role_id)

    user.role_id = role.id
    db.commit()
    db.refresh(user)
    logger.info(f"Assigned role {role.name} to user {user.username}")
    return user


def remove_role_from_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)
    user.role_id = None
    db.commit()
    db.refresh(user)
    logger.info(f"Removed role from user {user.username}")
    return user


def get_user_role(db: Session, user: User) -> Role | None:
    if user.role_id is None:
        return None
    return get_role(db, user.role_id)
