# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission catalog: resources, actions, permissions and the resource tree."""

import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy.orm import Session, joinedload

from src.models import Action, ActionType, Permission, Resource, Role, RolePermission
from src.rbac.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class ResourceNode:
    """One node of the resource tree, optionally annotated for a role."""

    id: uuid.UUID
    key: str
    name: str
    description: str | None
    parent_id: uuid.UUID | None
    is_active: bool
    assigned: bool = False
    inherited: bool = False
    children: list["ResourceNode"] = field(default_factory=list)


def build_permission_key(resource_key: str, action_key: str) -> str:
    return f"{resource_key}:{action_key}"


def find_permission_by_key(db: Session, permission_key: str) -> Permission | None:
    """Return the permission for a key if it is usable.

    Unknown keys and keys whose permission, resource or action is inactive
    all yield None.
    """
    return (
        db.query(Permission)
        .join(Resource, Permission.resource_id == Resource.id)
        .join(Action, Permission.action_id == Action.id)
        .filter(
            Permission.permission_key == permission_key,
            Permission.is_active.is_(True),
            Resource.is_active.is_(True),
            Action.is_active.is_(True),
        )
        .first()
    )


def get_permission(db: Session, permission_id: uuid.UUID) -> Permission | None:
    return db.query(Permission).filter(Permission.id == permission_id).first()


def get_permission_by_key(db: Session, permission_key: str) -> Permission | None:
    """Return the permission for a key regardless of its active flags."""
    return (
        db.query(Permission).filter(Permission.permission_key == permission_key).first()
    )


def list_permissions(db: Session, include_inactive: bool = False) -> list[Permission]:
    query = db.query(Permission).options(
        joinedload(Permission.resource), joinedload(Permission.action)
    )
    if not include_inactive:
        query = (
            query.join(Resource, Permission.resource_id == Resource.id)
            .join(Action, Permission.action_id == Action.id)
            .filter(
                Permission.is_active.is_(True),
                Resource.is_active.is_(True),
                Action.is_active.is_(True),
            )
        )
    return query.order_by(Permission.permission_key).all()


def get_resource_by_key(db: Session, key: str) -> Resource | None:
    return db.query(Resource).filter(Resource.key == key).first()


def get_action_by_key(db: Session, key: str) -> Action | None:
    return db.query(Action).filter(Action.key == key).first()


def register_resource(
    db: Session,
    key: str,
    name: str,
    description: str | None = None,
    parent: str | None = None,
) -> Resource:
    """Create a resource if it does not exist yet. Returns the resource."""
    resource = get_resource_by_key(db, key)
    if resource:
        return resource

    parent_resource = None
    if parent:
        parent_resource = get_resource_by_key(db, parent)
        if not parent_resource:
            raise NotFoundError("Resource", parent)

    resource = Resource(
        key=key,
        name=name,
        description=description,
        parent_resource_id=parent_resource.id if parent_resource else None,
    )
    db.add(resource)
    db.flush()
    logger.info(f"Registered resource {key}")
    return resource


def register_action(
    db: Session,
    key: str,
    name: str,
    action_type: ActionType = ActionType.CRUD,
    description: str | None = None,
) -> Action:
    """Create an action if it does not exist yet. Returns the action."""
    action = get_action_by_key(db, key)
    if action:
        return action

    action = Action(
        key=key, name=name, action_type=action_type, description=description
    )
    db.add(action)
    db.flush()
    logger.info(f"Registered action {key}")
    return action


def register_permission(
    db: Session,
    resource: str,
    action: str,
    description: str | None = None,
) -> Permission:
    """Create the permission for a resource and action if it does not exist."""
    permission_key = build_permission_key(resource, action)
    permission = get_permission_by_key(db, permission_key)
    if permission:
        return permission

    resource_obj = get_resource_by_key(db, resource)
    if not resource_obj:
        raise NotFoundError("Resource", resource)
    action_obj = get_action_by_key(db, action)
    if not action_obj:
        raise NotFoundError("Action", action)

    permission = Permission(
        permission_key=permission_key,
        resource_id=resource_obj.id,
        action_id=action_obj.id,
        description=description,
    )
    db.add(permission)
    db.flush()
    logger.info(f"Registered permission {permission_key}")
    return permission


def set_permission_active(
    db: Session, permission_id: uuid.UUID, is_active: bool
) -> Permission:
    permission = get_permission(db, permission_id)
    if not permission:
        raise NotFoundError("Permission", permission_id)
    permission.is_active = is_active
    db.commit()
    db.refresh(permission)
    logger.info(
        f"Permission {permission.permission_key} "
        f"{'activated' if is_active else 'deactivated'}"
    )
    return permission


def set_resource_active(
    db: Session, resource_id: uuid.UUID, is_active: bool
) -> Resource:
    resource = db.query(Resource).filter(Resource.id == resource_id).first()
    if not resource:
        raise NotFoundError("Resource", resource_id)
    resource.is_active = is_active
    db.commit()
    db.refresh(resource)
    logger.info(
        f"Resource {resource.key} {'activated' if is_active else 'deactivated'}"
    )
    return resource


def set_action_active(db: Session, action_id: uuid.UUID, is_active: bool) -> Action:
    action = db.query(Action).filter(Action.id == action_id).first()
    if not action:
        raise NotFoundError("Action", action_id)
    action.is_active = is_active
    db.commit()
    db.refresh(action)
    logger.info(f"Action {action.key} {'activated' if is_active else 'deactivated'}")
    return action


def _build_forest(
    resources: list[Resource], assigned_ids: set[uuid.UUID] | None = None
) -> list[ResourceNode]:
    nodes = {
        r.id: ResourceNode(
            id=r.id,
            key=r.key,
            name=r.name,
            description=r.description,
            parent_id=r.parent_resource_id,
            is_active=r.is_active,
            assigned=assigned_ids is not None and r.id in assigned_ids,
        )
        for r in resources
    }

    roots: list[ResourceNode] = []
    for node in nodes.values():
        parent = nodes.get(node.parent_id) if node.parent_id else None
        if parent is not None:
            parent.children.append(node)
        elif node.parent_id is None:
            roots.append(node)
        # A node whose parent was filtered out is dropped with that subtree

    def finish(node: ResourceNode, ancestor_assigned: bool) -> None:
        node.inherited = ancestor_assigned
        node.children.sort(key=lambda child: child.name)
        for child in node.children:
            finish(child, ancestor_assigned or node.assigned)

    roots.sort(key=lambda root: root.name)
    for root in roots:
        finish(root, False)
    return roots


def list_resource_tree(
    db: Session, include_inactive: bool = False
) -> list[ResourceNode]:
    """Return resources as a forest ordered by name at every level.

    Without ``include_inactive`` an inactive resource hides its whole subtree.
    """
    query = db.query(Resource)
    if not include_inactive:
        query = query.filter(Resource.is_active.is_(True))
    return _build_forest(query.all())


def get_resource_tree_for_role(db: Session, role_id: uuid.UUID) -> list[ResourceNode]:
    """Return the full resource forest annotated for a role.

    A resource is ``assigned`` when the role holds an active grant on one of
    its active permissions, and ``inherited`` when any ancestor is assigned.
    Inheritance is informational only.
    """
    role = db.query(Role).filter(Role.id == role_id).first()
    if not role:
        raise NotFoundError("Role", role_id)

    assigned_ids = {
        resource_id
        for (resource_id,) in db.query(Permission.resource_id)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(
            RolePermission.role_id == role_id,
            RolePermission.is_active.is_(True),
            Permission.is_active.is_(True),
        )
        .distinct()
        .all()
    }
    return _build_forest(db.query(Resource).all(), assigned_ids)
