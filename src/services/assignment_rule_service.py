# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Assignment guard: which roles may be granted a restricted permission.

A permission without any active assignment rule can be granted to every
role. As soon as one active rule exists for it, only the roles named by its
active rules qualify. The guard is checked by admin grant operations only;
it never changes what a user can do at runtime.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.orm import Session

from src.models import Permission, PermissionRoleAssignRule, Role
from src.rbac.errors import AlreadyExistsError, AssignmentNotAllowedError, NotFoundError
from src.services import catalog_service

logger = logging.getLogger(__name__)


@dataclass
class AvailablePermission:
    """A permission as seen from a role that might receive it."""

    permission: Permission
    can_assign: bool
    is_restricted: bool
    allowed_roles: list[str]


def _active_rules(db: Session):
    return db.query(PermissionRoleAssignRule).filter(
        PermissionRoleAssignRule.is_active.is_(True)
    )


def is_restricted(db: Session, permission_id: uuid.UUID) -> bool:
    return (
        _active_rules(db)
        .filter(PermissionRoleAssignRule.permission_id == permission_id)
        .first()
        is not None
    )


def can_assign(db: Session, role_id: uuid.UUID, permission_id: uuid.UUID) -> bool:
    if not is_restricted(db, permission_id):
        return True
    return (
        _active_rules(db)
        .filter(
            PermissionRoleAssignRule.permission_id == permission_id,
            PermissionRoleAssignRule.role_id == role_id,
        )
        .first()
        is not None
    )


def list_allowed_role_names(db: Session, permission_id: uuid.UUID) -> list[str]:
    """Names of the roles a restricted permission may go to, sorted."""
    rows = (
        db.query(Role.name)
        .join(PermissionRoleAssignRule, PermissionRoleAssignRule.role_id == Role.id)
        .filter(
            PermissionRoleAssignRule.permission_id == permission_id,
            PermissionRoleAssignRule.is_active.is_(True),
        )
        .order_by(Role.name)
        .all()
    )
    return [name for (name,) in rows]


def validate_assignment(
    db: Session, role_id: uuid.UUID, permission_id: uuid.UUID
) -> None:
    """Raise AssignmentNotAllowedError unless the role may receive the permission."""
    if can_assign(db, role_id, permission_id):
        return

    role = db.query(Role).filter(Role.id == role_id).first()
    permission = catalog_service.get_permission(db, permission_id)
    role_name = role.name if role else str(role_id)
    permission_key = permission.permission_key if permission else str(permission_id)
    logger.warning(f"Rejected assignment of {permission_key} to role {role_name}")
    raise AssignmentNotAllowedError(
        role_name, permission_key, list_allowed_role_names(db, permission_id)
    )


def list_restricted_permissions(db: Session) -> list[tuple[Permission, list[str]]]:
    """Every restricted permission with the roles it may be granted to."""
    permission_ids = {
        permission_id
        for (permission_id,) in _active_rules(db)
        .with_entities(PermissionRoleAssignRule.permission_id)
        .distinct()
        .all()
    }
    if not permission_ids:
        return []
    permissions = (
        db.query(Permission)
        .filter(Permission.id.in_(permission_ids))
        .order_by(Permission.permission_key)
        .all()
    )
    return [(p, list_allowed_role_names(db, p.id)) for p in permissions]


def list_available_permissions(
    db: Session, role_id: uuid.UUID
) -> list[AvailablePermission]:
    """All usable permissions annotated with whether ``role_id`` may get them."""
    if not db.query(Role).filter(Role.id == role_id).first():
        raise NotFoundError("Role", role_id)

    result = []
    for permission in catalog_service.list_permissions(db):
        allowed = list_allowed_role_names(db, permission.id)
        restricted = bool(allowed)
        result.append(
            AvailablePermission(
                permission=permission,
                can_assign=can_assign(db, role_id, permission.id),
                is_restricted=restricted,
                allowed_roles=allowed,
            )
        )
    return result


def get_assignment_rule(
    db: Session, rule_id: uuid.UUID
) -> PermissionRoleAssignRule | None:
    return (
        db.query(PermissionRoleAssignRule)
        .filter(PermissionRoleAssignRule.id == rule_id)
        .first()
    )


def list_assignment_rules(
    db: Session, permission_id: uuid.UUID | None = None
) -> list[PermissionRoleAssignRule]:
    query = db.query(PermissionRoleAssignRule)
    if permission_id is not None:
        query = query.filter(PermissionRoleAssignRule.permission_id == permission_id)
    return query.order_by(PermissionRoleAssignRule.created_at).all()


def create_assignment_rule(
    db: Session,
    role_id: uuid.UUID,
    permission_id: uuid.UUID,
    is_active: bool = True,
) -> PermissionRoleAssignRule:
    """Allow ``role_id`` to receive ``permission_id``, restricting it if needed."""
    if not db.query(Role).filter(Role.id == role_id).first():
        raise NotFoundError("Role", role_id)
    if not catalog_service.get_permission(db, permission_id):
        raise NotFoundError("Permission", permission_id)

    existing = (
        db.query(PermissionRoleAssignRule)
        .filter(
            PermissionRoleAssignRule.role_id == role_id,
            PermissionRoleAssignRule.permission_id == permission_id,
        )
        .first()
    )
    if existing:
        raise AlreadyExistsError(
            "PermissionRoleAssignRule",
            {"role_id": role_id, "permission_id": permission_id},
        )

    rule = PermissionRoleAssignRule(
        role_id=role_id, permission_id=permission_id, is_active=is_active
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)
    logger.info(f"Created assignment rule {rule.id} for permission {permission_id}")
    return rule


def update_assignment_rule_status(
    db: Session, rule_id: uuid.UUID, is_active: bool
) -> PermissionRoleAssignRule:
    rule = get_assignment_rule(db, rule_id)
    if not rule:
        raise NotFoundError("PermissionRoleAssignRule", rule_id)
    rule.is_active = is_active
    db.commit()
    db.refresh(rule)
    logger.info(
        f"Assignment rule {rule_id} {'activated' if is_active else 'deactivated'}"
    )
    return rule
