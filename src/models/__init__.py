# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from src.models.action import Action
from src.models.base import Base, TimestampMixin
from src.models.course import Course
from src.models.enums import ActionType, FilterType
from src.models.filter_rule import FilterRule
from src.models.permission import Permission
from src.models.permission_role_assign_rule import PermissionRoleAssignRule
from src.models.resource import Resource
from src.models.review import Review
from src.models.role import Role
from src.models.role_permission import RolePermission
from src.models.session import UserSession
from src.models.user import User

__all__ = [
    "Action",
    "ActionType",
    "Base",
    "Course",
    "FilterRule",
    "FilterType",
    "Permission",
    "PermissionRoleAssignRule",
    "Resource",
    "Review",
    "Role",
    "RolePermission",
    "TimestampMixin",
    "User",
    "UserSession",
]
