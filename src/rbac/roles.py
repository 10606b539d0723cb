# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Default roles, their grants and the assignment guard rules."""

from src.models.enums import FilterType

from .permissions import CORE_PERMISSIONS

ADMIN_ROLE = "ADMIN"
INSTRUCTOR_ROLE = "INSTRUCTOR"
STUDENT_ROLE = "STUDENT"

# Admin sees every row of every resource
ADMIN_GRANTS = {
    f"{p['resource']}:{p['action']}": FilterType.ALL for p in CORE_PERMISSIONS
}

# Only ADMIN is a system role; the others can be edited by administrators
DEFAULT_ROLES = [
    {
        "name": ADMIN_ROLE,
        "is_system": True,
        "description": "Platform administrator with unrestricted access.",
        "grants": ADMIN_GRANTS,
    },
    {
        "name": INSTRUCTOR_ROLE,
        "is_system": False,
        "description": "Creates and teaches courses.",
        "grants": {
            "course:CREATE": FilterType.ALL,
            "course:READ": FilterType.OWN,
            "course:UPDATE": FilterType.OWN,
            "course:DELETE": FilterType.OWN,
            "course:PUBLISH": FilterType.OWN,
            "lesson:CREATE": FilterType.OWN,
            "lesson:READ": FilterType.OWN,
            "lesson:UPDATE": FilterType.OWN,
            "lesson:DELETE": FilterType.OWN,
            "quiz:CREATE": FilterType.OWN,
            "quiz:READ": FilterType.OWN,
            "quiz:UPDATE": FilterType.OWN,
            "quiz:DELETE": FilterType.OWN,
            "enrollment:READ": FilterType.OWN,
            "review:READ": FilterType.ALL,
            "payout:READ": FilterType.OWN,
            "discount:CREATE": FilterType.ALL,
            "discount:READ": FilterType.OWN,
            "chat:READ": FilterType.OWN,
            "chat:CREATE": FilterType.ALL,
        },
    },
    {
        "name": STUDENT_ROLE,
        "is_system": False,
        "description": "Enrolls in and reviews courses.",
        "grants": {
            "course:READ": FilterType.ALL,
            "lesson:READ": FilterType.ALL,
            "quiz:READ": FilterType.ALL,
            "enrollment:CREATE": FilterType.ALL,
            "enrollment:READ": FilterType.OWN,
            "certificate:READ": FilterType.OWN,
            "review:CREATE": FilterType.ALL,
            "review:READ": FilterType.ALL,
            "review:UPDATE": FilterType.OWN,
            "review:DELETE": FilterType.OWN,
            "payment:READ": FilterType.OWN,
            "refund:CREATE": FilterType.OWN,
            "chat:READ": FilterType.OWN,
            "chat:CREATE": FilterType.ALL,
        },
    },
]

# Permissions that only the listed roles may ever be granted
ASSIGNMENT_RULES = [
    {"permission": "payout:APPROVE", "roles": [ADMIN_ROLE]},
    {"permission": "refund:APPROVE", "roles": [ADMIN_ROLE]},
    {"permission": "role:UPDATE", "roles": [ADMIN_ROLE]},
    {"permission": "permission:UPDATE", "roles": [ADMIN_ROLE]},
]
