# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Errors raised by the authorization admin operations.

Runtime permission checks never raise these: a denial is an ordinary
result. They are raised by rule management and mapped to HTTP responses in
``src.api.errors``.
"""

from typing import Any


class RbacError(Exception):
    """Base exception for authorization store operations."""


class NotFoundError(RbacError):
    """Raised when a role, permission, grant or rule does not exist."""

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id {entity_id} not found")


class AlreadyExistsError(RbacError):
    """Raised when creating a record that would duplicate an active one."""

    def __init__(self, entity_type: str, criteria: dict[str, Any]):
        self.entity_type = entity_type
        self.criteria = criteria
        details = ", ".join(f"{key}={value}" for key, value in criteria.items())
        super().__init__(f"Active {entity_type} already exists for {details}")


class AssignmentNotAllowedError(RbacError):
    """Raised when a restricted permission is granted to a role not allowed it."""

    def __init__(self, role_name: str, permission_key: str, allowed_roles: list[str]):
        self.role_name = role_name
        self.permission_key = permission_key
        self.allowed_roles = allowed_roles
        super().__init__(
            f"Permission '{permission_key}' cannot be assigned to role "
            f"'{role_name}'. Allowed roles: {', '.join(allowed_roles)}"
        )


class SystemRoleError(RbacError):
    """Raised when changing or deleting a role that ships with the platform."""

    def __init__(self, role_name: str, operation: str):
        self.role_name = role_name
        self.operation = operation
        super().__init__(f"System role '{role_name}' cannot be {operation}")
