# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Grant management: which permissions a role holds, and at which scope."""

import logging
import uuid
from collections.abc import Iterable

from sqlalchemy.orm import Session, joinedload

from src.models import FilterRule, FilterType, Permission, RolePermission
from src.rbac.errors import NotFoundError
from src.services import assignment_rule_service, catalog_service, rbac_service

logger = logging.getLogger(__name__)


def get_role_permission(
    db: Session, role_permission_id: uuid.UUID
) -> RolePermission | None:
    return (
        db.query(RolePermission)
        .filter(RolePermission.id == role_permission_id)
        .first()
    )


def list_role_permissions(
    db: Session, role_id: uuid.UUID, include_inactive: bool = True
) -> list[RolePermission]:
    query = (
        db.query(RolePermission)
        .join(Permission, RolePermission.permission_id == Permission.id)
        .options(
            joinedload(RolePermission.permission),
            joinedload(RolePermission.filter_rules),
        )
        .filter(RolePermission.role_id == role_id)
    )
    if not include_inactive:
        query = query.filter(RolePermission.is_active.is_(True))
    return query.order_by(Permission.permission_key).all()


def _require_role(db: Session, role_id: uuid.UUID):
    role = rbac_service.get_role(db, role_id)
    if not role:
        raise NotFoundError("Role", role_id)
    return role


def _require_permission(db: Session, permission_key: str) -> Permission:
    permission = catalog_service.find_permission_by_key(db, permission_key)
    if not permission:
        raise NotFoundError("Permission", permission_key)
    return permission


def _set_scope(role_permission: RolePermission, filter_type: FilterType) -> None:
    """Make ``filter_type`` the single active scope of a grant."""
    active = [
        rule
        for rule in role_permission.filter_rules
        if rule.is_active and not rule.is_deleted
    ]
    if any(rule.filter_type == filter_type for rule in active):
        for rule in active:
            if rule.filter_type != filter_type:
                rule.is_active = False
        return
    for rule in active:
        rule.is_active = False
    role_permission.filter_rules.append(
        FilterRule(filter_type=filter_type, is_active=True)
    )


def assign_permission_to_role(
    db: Session,
    role_id: uuid.UUID,
    permission_key: str,
    filter_type: FilterType = FilterType.ALL,
) -> RolePermission:
    """Grant a permission to a role with the given scope.

    Restricted permissions can only go to the roles their assignment rules
    name; anything else raises AssignmentNotAllowedError.
    """
    role = _require_role(db, role_id)
    permission = _require_permission(db, permission_key)
    assignment_rule_service.validate_assignment(db, role.id, permission.id)

    role_permission = RolePermission(
        role_id=role.id, permission_id=permission.id, is_active=True
    )
    role_permission.filter_rules.append(
        FilterRule(filter_type=FilterType(filter_type), is_active=True)
    )
    db.add(role_permission)
    db.commit()
    db.refresh(role_permission)
    logger.info(
        f"Granted {permission_key} ({FilterType(filter_type).value}) to role "
        f"{role.name}"
    )
    return role_permission


def set_role_permission_active(
    db: Session, role_permission_id: uuid.UUID, is_active: bool
) -> RolePermission:
    role_permission = get_role_permission(db, role_permission_id)
    if not role_permission:
        raise NotFoundError("RolePermission", role_permission_id)
    role_permission.is_active = is_active
    db.commit()
    db.refresh(role_permission)
    logger.info(
        f"Role permission {role_permission_id} "
        f"{'activated' if is_active else 'deactivated'}"
    )
    return role_permission


def remove_permission_from_role(
    db: Session, role_id: uuid.UUID, permission_key: str
) -> list[RolePermission]:
    """Deactivate every active grant of ``permission_key`` held by a role."""
    role = _require_role(db, role_id)
    grants = (
        db.query(RolePermission)
        .join(Permission, RolePermission.permission_id == Permission.id)
        .filter(
            RolePermission.role_id == role.id,
            RolePermission.is_active.is_(True),
            Permission.permission_key == permission_key,
        )
        .all()
    )
    if not grants:
        raise NotFoundError("RolePermission", f"{role.name}/{permission_key}")
    for role_permission in grants:
        role_permission.is_active = False
    db.commit()
    logger.info(f"Removed {permission_key} from role {role.name}")
    return grants


def replace_role_permissions(
    db: Session,
    role_id: uuid.UUID,
    grants: Iterable[tuple[str, FilterType]],
) -> list[RolePermission]:
    """Make ``grants`` the complete set of active grants of a role.

    Listed keys are granted (or reactivated) with the requested scope and
    every other grant of the role is deactivated. Nothing is deleted. All
    listed keys are checked against the assignment guard before any change
    is made.
    """
    role = _require_role(db, role_id)
    requested: dict[uuid.UUID, FilterType] = {}
    for permission_key, filter_type in grants:
        permission = _require_permission(db, permission_key)
        assignment_rule_service.validate_assignment(db, role.id, permission.id)
        requested[permission.id] = FilterType(filter_type)

    existing = (
        db.query(RolePermission)
        .options(joinedload(RolePermission.filter_rules))
        .filter(RolePermission.role_id == role.id)
        .order_by(RolePermission.created_at)
        .all()
    )
    by_permission: dict[uuid.UUID, list[RolePermission]] = {}
    for role_permission in existing:
        by_permission.setdefault(role_permission.permission_id, []).append(
            role_permission
        )

    for role_permission in existing:
        if role_permission.permission_id not in requested:
            role_permission.is_active = False

    for permission_id, filter_type in requested.items():
        current = by_permission.get(permission_id)
        if current:
            primary, *duplicates = current
            primary.is_active = True
            _set_scope(primary, filter_type)
            for duplicate in duplicates:
                duplicate.is_active = False
        else:
            role_permission = RolePermission(
                role_id=role.id, permission_id=permission_id, is_active=True
            )
            role_permission.filter_rules.append(
                FilterRule(filter_type=filter_type, is_active=True)
            )
            db.add(role_permission)

    db.commit()
    logger.info(f"Replaced grants of role {role.name} with {len(requested)} entries")
    return list_role_permissions(db, role.id, include_inactive=False)
