# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Filter rule store: the data scope attached to each role permission."""

import logging
import uuid
from datetime import datetime

from sqlalchemy.orm import Session, joinedload

from src.models import (
    Action,
    FilterRule,
    FilterType,
    Permission,
    Resource,
    RolePermission,
    User,
)
from src.rbac.errors import AlreadyExistsError, NotFoundError

logger = logging.getLogger(__name__)


def _applicable_rules_query(db: Session, *columns):
    """Rules whose every active flag along the grant path is set."""
    return (
        db.query(*columns)
        .select_from(FilterRule)
        .join(RolePermission, FilterRule.role_permission_id == RolePermission.id)
        .join(Permission, RolePermission.permission_id == Permission.id)
        .join(Resource, Permission.resource_id == Resource.id)
        .join(Action, Permission.action_id == Action.id)
        .filter(
            FilterRule.is_active.is_(True),
            FilterRule.deleted_at.is_(None),
            RolePermission.is_active.is_(True),
            Permission.is_active.is_(True),
            Resource.is_active.is_(True),
            Action.is_active.is_(True),
        )
    )


def find_active_rules_for(
    db: Session, user_id: uuid.UUID, permission_key: str
) -> set[FilterType]:
    """Every scope that applies to ``user_id`` for ``permission_key``.

    An empty set means the user has no applicable rule.
    """
    rows = (
        _applicable_rules_query(db, FilterRule.filter_type)
        .join(User, User.role_id == RolePermission.role_id)
        .filter(User.id == user_id, Permission.permission_key == permission_key)
        .distinct()
        .all()
    )
    return {filter_type for (filter_type,) in rows}


def find_active_rules_for_role(
    db: Session, role_id: uuid.UUID
) -> list[tuple[str, FilterType]]:
    """(permission key, scope) pairs applicable to a role."""
    rows = (
        _applicable_rules_query(db, Permission.permission_key, FilterRule.filter_type)
        .filter(RolePermission.role_id == role_id)
        .distinct()
        .all()
    )
    return [(key, filter_type) for key, filter_type in rows]


def get_rule(db: Session, rule_id: uuid.UUID) -> FilterRule | None:
    """Get a rule by id. Soft-deleted rules are not returned."""
    return (
        db.query(FilterRule)
        .filter(FilterRule.id == rule_id, FilterRule.deleted_at.is_(None))
        .first()
    )


def _other_active_rule(
    db: Session, role_permission_id: uuid.UUID, exclude_id: uuid.UUID | None = None
) -> FilterRule | None:
    query = db.query(FilterRule).filter(
        FilterRule.role_permission_id == role_permission_id,
        FilterRule.is_active.is_(True),
        FilterRule.deleted_at.is_(None),
    )
    if exclude_id is not None:
        query = query.filter(FilterRule.id != exclude_id)
    return query.first()


def create_rule(
    db: Session, role_permission_id: uuid.UUID, filter_type: FilterType
) -> FilterRule:
    """Attach a scope to a grant.

    A grant carries at most one active rule at a time.
    """
    role_permission = (
        db.query(RolePermission)
        .filter(RolePermission.id == role_permission_id)
        .first()
    )
    if not role_permission:
        raise NotFoundError("RolePermission", role_permission_id)

    if _other_active_rule(db, role_permission_id):
        raise AlreadyExistsError(
            "FilterRule", {"role_permission_id": role_permission_id}
        )

    rule = FilterRule(
        role_permission_id=role_permission_id,
        filter_type=FilterType(filter_type),
        is_active=True,
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)
    logger.info(
        f"Created {rule.filter_type.value} filter rule {rule.id} "
        f"for role permission {role_permission_id}"
    )
    return rule


def update_rule_status(db: Session, rule_id: uuid.UUID, is_active: bool) -> FilterRule:
    """Activate or deactivate a rule.

    Activation is refused while the grant already has another active rule.
    """
    rule = get_rule(db, rule_id)
    if not rule:
        raise NotFoundError("FilterRule", rule_id)
    if is_active and _other_active_rule(db, rule.role_permission_id, rule.id):
        raise AlreadyExistsError(
            "FilterRule", {"role_permission_id": rule.role_permission_id}
        )
    rule.is_active = is_active
    db.commit()
    db.refresh(rule)
    logger.info(f"Filter rule {rule_id} {'activated' if is_active else 'deactivated'}")
    return rule


def delete_rule(db: Session, rule_id: uuid.UUID) -> FilterRule:
    """Soft-delete a rule. It stays in the table but never applies again."""
    rule = get_rule(db, rule_id)
    if not rule:
        raise NotFoundError("FilterRule", rule_id)
    rule.is_active = False
    rule.deleted_at = datetime.utcnow()
    db.commit()
    db.refresh(rule)
    logger.info(f"Deleted filter rule {rule_id}")
    return rule


def list_rules_by_role(db: Session, role_id: uuid.UUID) -> list[FilterRule]:
    """All non-deleted rules of a role, active or not."""
    return (
        db.query(FilterRule)
        .join(RolePermission, FilterRule.role_permission_id == RolePermission.id)
        .join(Permission, RolePermission.permission_id == Permission.id)
        .options(
            joinedload(FilterRule.role_permission).joinedload(
                RolePermission.permission
            )
        )
        .filter(RolePermission.role_id == role_id, FilterRule.deleted_at.is_(None))
        .order_by(Permission.permission_key, FilterRule.filter_type)
        .all()
    )


def list_rules_by_permission(db: Session, permission_key: str) -> list[FilterRule]:
    """Active rules for a permission key across all roles."""
    return (
        db.query(FilterRule)
        .join(RolePermission, FilterRule.role_permission_id == RolePermission.id)
        .join(Permission, RolePermission.permission_id == Permission.id)
        .options(
            joinedload(FilterRule.role_permission).joinedload(
                RolePermission.permission
            )
        )
        .filter(
            Permission.permission_key == permission_key,
            FilterRule.is_active.is_(True),
            FilterRule.deleted_at.is_(None),
        )
        .order_by(RolePermission.role_id, FilterRule.filter_type)
        .all()
    )
