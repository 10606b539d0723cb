"""Services package."""
from src.services import (
    assignment_rule_service,
    auth_service,
    authorization_service,
    catalog_service,
    course_service,
    filter_rule_service,
    rbac_service,
    role_permission_service,
)

__all__ = [
    "assignment_rule_service",
    "auth_service",
    "authorization_service",
    "catalog_service",
    "course_service",
    "filter_rule_service",
    "rbac_service",
    "role_permission_service",
]
