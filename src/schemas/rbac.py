# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import ActionType, FilterType
from src.rbac.filters import EffectiveFilter


class PermissionSchema(BaseModel):
    """Schema representing a permission."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    permission_key: str
    description: str | None
    is_active: bool
    resource_key: str
    action_key: str
    action_type: ActionType
    is_usable: bool

    @classmethod
    def from_permission(cls, permission) -> "PermissionSchema":
        return cls(
            id=permission.id,
            permission_key=permission.permission_key,
            description=permission.description,
            is_active=permission.is_active,
            resource_key=permission.resource.key,
            action_key=permission.action.key,
            action_type=permission.action.action_type,
            is_usable=permission.is_usable,
        )


class PermissionStatusUpdate(BaseModel):
    is_active: bool


class RoleSchema(BaseModel):
    """Schema representing a role."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    is_system: bool
    description: str | None


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: str | None = None


class RoleUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    description: str | None = None


class ResourceNodeSchema(BaseModel):
    """A resource with its children; role annotations are optional."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    key: str
    name: str
    description: str | None
    parent_id: uuid.UUID | None
    is_active: bool
    assigned: bool = False
    inherited: bool = False
    children: list["ResourceNodeSchema"] = []


class FilterRuleSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    role_permission_id: uuid.UUID
    role_id: uuid.UUID
    permission_key: str
    filter_type: FilterType
    is_active: bool
    created_at: datetime
    updated_at: datetime


class FilterRuleCreate(BaseModel):
    role_permission_id: uuid.UUID
    filter_type: FilterType


class FilterRuleStatusUpdate(BaseModel):
    is_active: bool


class RolePermissionSchema(BaseModel):
    """A permission granted to a role, with its filter rules."""

    id: uuid.UUID
    role_id: uuid.UUID
    permission_key: str
    is_active: bool
    filter_rules: list[FilterRuleSchema]

    @classmethod
    def from_role_permission(cls, role_permission) -> "RolePermissionSchema":
        return cls(
            id=role_permission.id,
            role_id=role_permission.role_id,
            permission_key=role_permission.permission.permission_key,
            is_active=role_permission.is_active,
            filter_rules=[
                FilterRuleSchema.model_validate(rule)
                for rule in role_permission.filter_rules
                if not rule.is_deleted
            ],
        )



class RoleWithPermissionsSchema(RoleSchema):
    """A role with every grant it holds, active or not."""

    permissions: list[RolePermissionSchema]


class RolePermissionAssign(BaseModel):
    permission_key: str = Field(..., min_length=3, max_length=150)
    filter_type: FilterType = FilterType.ALL


class RolePermissionReplace(BaseModel):
    """Complete list of grants a role should end up with."""

    permissions: list[RolePermissionAssign]


class RolePermissionStatusUpdate(BaseModel):
    is_active: bool


class AvailablePermissionSchema(BaseModel):
    permission: PermissionSchema
    can_assign: bool
    is_restricted: bool
    allowed_roles: list[str]


class RestrictedPermissionSchema(BaseModel):
    permission: PermissionSchema
    allowed_roles: list[str]


class AssignmentRuleSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    role_id: uuid.UUID
    permission_id: uuid.UUID
    is_active: bool


class AssignmentRuleCreate(BaseModel):
    role_id: uuid.UUID
    permission_id: uuid.UUID
    is_active: bool = True


class AssignmentRuleStatusUpdate(BaseModel):
    is_active: bool


class PermissionCheckRequest(BaseModel):
    permission_key: str


class AuthorizationResultSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    permission_key: str
    has_permission: bool
    effective_filter: EffectiveFilter


class UserPermissionsSchema(BaseModel):
    """Schema representing a user's effective permissions."""

    user_id: uuid.UUID
    role: str | None
    permissions: dict[str, EffectiveFilter]


class UserRoleAssign(BaseModel):
    role_id: uuid.UUID
