# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from src.api.deps import get_current_user, get_db, require_permission
from src.models import User
from src.schemas.rbac import (
    AssignmentRuleCreate,
    AssignmentRuleSchema,
    AssignmentRuleStatusUpdate,
    AuthorizationResultSchema,
    AvailablePermissionSchema,
    PermissionCheckRequest,
    PermissionSchema,
    PermissionStatusUpdate,
    ResourceNodeSchema,
    RestrictedPermissionSchema,
    RoleCreate,
    RolePermissionAssign,
    RolePermissionReplace,
    RolePermissionSchema,
    RolePermissionStatusUpdate,
    RoleSchema,
    RoleUpdate,
    RoleWithPermissionsSchema,
    UserPermissionsSchema,
    UserRoleAssign,
)
from src.services import (
    assignment_rule_service,
    auth_service,
    authorization_service,
    catalog_service,
    rbac_service,
    role_permission_service,
)

router = APIRouter()


def _get_role_or_404(db: Session, role_id: uuid.UUID):
    role = rbac_service.get_role(db, role_id)
    if not role:
        raise HTTPException(status_code=404, detail="Role not found")
    return role


def _user_permissions(db: Session, user: User) -> UserPermissionsSchema:
    role = rbac_service.get_user_role(db, user)
    return UserPermissionsSchema(
        user_id=user.id,
        role=role.name if role else None,
        permissions=authorization_service.get_user_permissions(db, user),
    )


@router.get("/rbac/roles", response_model=list[RoleSchema], summary="List all roles")
def list_roles(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:READ")),
):
    """Retrieve a list of all roles in the system."""
    return rbac_service.list_roles(db)


@router.post(
    "/rbac/roles",
    response_model=RoleSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new custom role",
)
def create_role(
    data: RoleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:UPDATE")),
):
    """Create a role without any grants. 409 if the name is taken."""
    return rbac_service.create_role(db, data.name, description=data.description)


@router.get(
    "/rbac/roles/{role_id}",
    response_model=RoleWithPermissionsSchema,
    summary="Get a role by ID with its permissions",
)
def get_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:READ")),
):
    role = _get_role_or_404(db, role_id)
    return RoleWithPermissionsSchema(
        id=role.id,
        name=role.name,
        is_system=role.is_system,
        description=role.description,
        permissions=[
            RolePermissionSchema.from_role_permission(rp)
            for rp in role_permission_service.list_role_permissions(db, role_id)
        ],
    )


@router.put(
    "/rbac/roles/{role_id}",
    response_model=RoleSchema,
    summary="Update an existing role",
)
def update_role(
    role_id: uuid.UUID,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:UPDATE")),
):
    """Rename or re-describe a custom role. System roles cannot be modified."""
    return rbac_service.update_role(
        db, role_id, name=data.name, description=data.description
    )


@router.delete(
    "/rbac/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a custom role",
)
def delete_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("role:UPDATE")),
) -> Response:
    """Delete a custom role. System roles cannot be deleted."""
    rbac_service.delete_role(db, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get(
    "/rbac/roles/{role_id}/permissions",
    response_model=list[RolePermissionSchema],
    summary="List the permissions granted to a role",
)
def list_role_permissions(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:READ")),
):
    """Active and inactive grants of a role, each with its filter rules."""
    _get_role_or_404(db, role_id)
    return [
        RolePermissionSchema.from_role_permission(rp)
        for rp in role_permission_service.list_role_permissions(db, role_id)
    ]


@router.post(
    "/rbac/roles/{role_id}/permissions",
    response_model=RolePermissionSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Grant a permission to a role",
)
def assign_role_permission(
    role_id: uuid.UUID,
    data: RolePermissionAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
):
    """Grant a permission with a data scope.

    Restricted permissions can only go to roles allowed by an assignment rule;
    other roles get a 403.
    """
    role_permission = role_permission_service.assign_permission_to_role(
        db, role_id, data.permission_key, data.filter_type
    )
    return RolePermissionSchema.from_role_permission(role_permission)


@router.put(
    "/rbac/roles/{role_id}/permissions",
    response_model=list[RolePermissionSchema],
    summary="Replace all permissions of a role",
)
def replace_role_permissions(
    role_id: uuid.UUID,
    data: RolePermissionReplace,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
):
    """Make the given list the role's complete set of active grants."""
    role_permissions = role_permission_service.replace_role_permissions(
        db,
        role_id,
        [(item.permission_key, item.filter_type) for item in data.permissions],
    )
    return [RolePermissionSchema.from_role_permission(rp) for rp in role_permissions]


@router.delete(
    "/rbac/roles/{role_id}/permissions/{permission_key}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a permission from a role",
)
def remove_role_permission(
    role_id: uuid.UUID,
    permission_key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
) -> Response:
    """Deactivate the role's grant of a permission. The rows are kept."""
    role_permission_service.remove_permission_from_role(db, role_id, permission_key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.patch(
    "/rbac/role-permissions/{role_permission_id}",
    response_model=RolePermissionSchema,
    summary="Activate or deactivate a role permission",
)
def update_role_permission_status(
    role_permission_id: uuid.UUID,
    data: RolePermissionStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
):
    role_permission = role_permission_service.set_role_permission_active(
        db, role_permission_id, data.is_active
    )
    return RolePermissionSchema.from_role_permission(role_permission)


@router.get(
    "/rbac/roles/{role_id}/resources",
    response_model=list[ResourceNodeSchema],
    summary="Resource tree annotated for a role",
)
def get_role_resource_tree(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:READ")),
):
    """Every resource, marked as assigned to the role or inherited from a parent."""
    return catalog_service.get_resource_tree_for_role(db, role_id)


@router.get(
    "/rbac/roles/{role_id}/available-permissions",
    response_model=list[AvailablePermissionSchema],
    summary="Permissions that could be granted to a role",
)
def list_available_permissions(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:READ")),
):
    return [
        AvailablePermissionSchema(
            permission=PermissionSchema.from_permission(item.permission),
            can_assign=item.can_assign,
            is_restricted=item.is_restricted,
            allowed_roles=item.allowed_roles,
        )
        for item in assignment_rule_service.list_available_permissions(db, role_id)
    ]


@router.get(
    "/rbac/resources",
    response_model=list[ResourceNodeSchema],
    summary="Resource tree",
)
def list_resources(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:READ")),
):
    return catalog_service.list_resource_tree(db, include_inactive=include_inactive)


@router.get(
    "/rbac/permissions",
    response_model=list[PermissionSchema],
    summary="List all available permissions",
)
def list_permissions(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:READ")),
):
    """Retrieve the permission catalog ordered by key."""
    return [
        PermissionSchema.from_permission(p)
        for p in catalog_service.list_permissions(db, include_inactive=include_inactive)
    ]


@router.get(
    "/rbac/permissions/restricted",
    response_model=list[RestrictedPermissionSchema],
    summary="Permissions limited to specific roles",
)
def list_restricted_permissions(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:READ")),
):
    restricted = assignment_rule_service.list_restricted_permissions(db)
    return [
        RestrictedPermissionSchema(
            permission=PermissionSchema.from_permission(permission),
            allowed_roles=allowed_roles,
        )
        for permission, allowed_roles in restricted
    ]


@router.patch(
    "/rbac/permissions/{permission_id}",
    response_model=PermissionSchema,
    summary="Activate or deactivate a permission",
)
def update_permission_status(
    permission_id: uuid.UUID,
    data: PermissionStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
):
    """Deactivating a permission denies it to every role immediately."""
    permission = catalog_service.set_permission_active(
        db, permission_id, data.is_active
    )
    return PermissionSchema.from_permission(permission)


@router.post(
    "/rbac/assignment-rules",
    response_model=AssignmentRuleSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Allow a role to receive a restricted permission",
)
def create_assignment_rule(
    data: AssignmentRuleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
):
    return assignment_rule_service.create_assignment_rule(
        db, data.role_id, data.permission_id, data.is_active
    )


@router.patch(
    "/rbac/assignment-rules/{rule_id}",
    response_model=AssignmentRuleSchema,
    summary="Activate or deactivate an assignment rule",
)
def update_assignment_rule_status(
    rule_id: uuid.UUID,
    data: AssignmentRuleStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
):
    return assignment_rule_service.update_assignment_rule_status(
        db, rule_id, data.is_active
    )


def _get_user_or_404(db: Session, user_id: uuid.UUID) -> User:
    user = auth_service.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get(
    "/rbac/users/{user_id}/role",
    response_model=UserPermissionsSchema,
    summary="Get a user's role and effective permissions",
)
def get_user_role(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:READ")),
):
    return _user_permissions(db, _get_user_or_404(db, user_id))


@router.put(
    "/rbac/users/{user_id}/role",
    response_model=UserPermissionsSchema,
    summary="Assign a role to a user",
)
def assign_user_role(
    user_id: uuid.UUID,
    data: UserRoleAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:UPDATE")),
):
    """Give a user a role, replacing the one they held before."""
    user = rbac_service.assign_role_to_user(db, user_id, data.role_id)
    return _user_permissions(db, user)


@router.delete(
    "/rbac/users/{user_id}/role",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a user's role",
)
def remove_user_role(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("user:UPDATE")),
) -> Response:
    rbac_service.remove_role_from_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/rbac/me/permissions",
    response_model=UserPermissionsSchema,
    summary="Get current user's effective permissions",
)
def get_my_permissions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _user_permissions(db, current_user)


@router.post(
    "/rbac/check",
    response_model=AuthorizationResultSchema,
    summary="Evaluate a permission for the current user",
)
def check_permission(
    data: PermissionCheckRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return authorization_service.evaluate_permission(
        db, current_user, data.permission_key
    )
