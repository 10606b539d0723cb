# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import logging

from sqlalchemy.orm import Session

from src.models import RolePermission
from src.rbac.permissions import CORE_ACTIONS, CORE_PERMISSIONS, CORE_RESOURCES
from src.rbac.roles import ASSIGNMENT_RULES, DEFAULT_ROLES

from . import (
    assignment_rule_service,
    catalog_service,
    rbac_service,
    role_permission_service,
)

logger = logging.getLogger(__name__)


def seed_rbac_data(db: Session) -> None:
    """Seeds the catalog, default roles, assignment rules and grants.

    This function is idempotent.
    @param db: SQLAlchemy Session object
    """
    # Resources are listed parents first
    for resource_data in CORE_RESOURCES:
        catalog_service.register_resource(db, **resource_data)
    for action_data in CORE_ACTIONS:
        catalog_service.register_action(db, **action_data)
    for perm_data in CORE_PERMISSIONS:
        catalog_service.register_permission(db, **perm_data)
    db.commit()

    roles = {}
    for role_data in DEFAULT_ROLES:
        role = rbac_service.get_role_by_name(db, role_data["name"])
        if not role:
            role = rbac_service.create_role(
                db,
                name=role_data["name"],
                description=role_data["description"],
                is_system=role_data["is_system"],
            )
        roles[role.name] = role

    # Guard rules go in before any grant so seeded grants respect them
    for rule_data in ASSIGNMENT_RULES:
        permission = catalog_service.get_permission_by_key(db, rule_data["permission"])
        existing_role_ids = {
            rule.role_id
            for rule in assignment_rule_service.list_assignment_rules(
                db, permission.id
            )
        }
        for role_name in rule_data["roles"]:
            role = roles[role_name]
            if role.id not in existing_role_ids:
                assignment_rule_service.create_assignment_rule(
                    db, role.id, permission.id
                )

    for role_data in DEFAULT_ROLES:
        role = roles[role_data["name"]]
        granted = {
            rp.permission.permission_key
            for rp in db.query(RolePermission)
            .filter(RolePermission.role_id == role.id)
            .all()
        }
        for permission_key, filter_type in role_data["grants"].items():
            if permission_key in granted:
                continue
            role_permission_service.assign_permission_to_role(
                db, role.id, permission_key, filter_type
            )

    logger.info("RBAC seed data is up to date")
