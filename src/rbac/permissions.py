# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Built-in resources, actions and permissions seeded on first run."""

from src.models.enums import ActionType

# Resources form a display tree; "parent" names the parent resource key
CORE_RESOURCES = [
    {"key": "course", "name": "Course", "description": "Courses and their content"},
    {"key": "lesson", "name": "Lesson", "parent": "course"},
    {"key": "quiz", "name": "Quiz", "parent": "lesson"},
    {"key": "enrollment", "name": "Enrollment", "parent": "course"},
    {"key": "certificate", "name": "Certificate", "parent": "enrollment"},
    {"key": "review", "name": "Review", "parent": "course"},
    {"key": "payment", "name": "Payment", "description": "Payments and payouts"},
    {"key": "refund", "name": "Refund", "parent": "payment"},
    {"key": "payout", "name": "Payout", "parent": "payment"},
    {"key": "discount", "name": "Discount"},
    {"key": "chat", "name": "Chat"},
    {"key": "user", "name": "User", "description": "User accounts"},
    {"key": "role", "name": "Role", "description": "Roles and role assignments"},
    {
        "key": "permission",
        "name": "Permission",
        "description": "Permission catalog, grants and filter rules",
    },
]

CORE_ACTIONS = [
    {"key": "CREATE", "name": "Create", "action_type": ActionType.CRUD},
    {"key": "READ", "name": "Read", "action_type": ActionType.CRUD},
    {"key": "UPDATE", "name": "Update", "action_type": ActionType.CRUD},
    {"key": "DELETE", "name": "Delete", "action_type": ActionType.CRUD},
    {"key": "APPROVE", "name": "Approve", "action_type": ActionType.BUSINESS},
    {"key": "PUBLISH", "name": "Publish", "action_type": ActionType.BUSINESS},
]

_CRUD = ["CREATE", "READ", "UPDATE", "DELETE"]

CORE_PERMISSIONS = [
    # Course catalog
    *({"resource": "course", "action": action} for action in _CRUD),
    {"resource": "course", "action": "PUBLISH", "description": "Publish a course"},
    *({"resource": "lesson", "action": action} for action in _CRUD),
    *({"resource": "quiz", "action": action} for action in _CRUD),
    # Learning
    {"resource": "enrollment", "action": "CREATE"},
    {"resource": "enrollment", "action": "READ"},
    {"resource": "certificate", "action": "READ"},
    *({"resource": "review", "action": action} for action in _CRUD),
    # Money
    {"resource": "payment", "action": "READ"},
    {"resource": "refund", "action": "CREATE"},
    {"resource": "refund", "action": "APPROVE", "description": "Approve refunds"},
    {"resource": "payout", "action": "READ"},
    {
        "resource": "payout",
        "action": "APPROVE",
        "description": "Approve instructor payouts",
    },
    *({"resource": "discount", "action": action} for action in _CRUD),
    # Messaging
    {"resource": "chat", "action": "READ"},
    {"resource": "chat", "action": "CREATE"},
    # Administration
    {"resource": "user", "action": "READ"},
    {"resource": "user", "action": "UPDATE"},
    {"resource": "role", "action": "READ"},
    {"resource": "role", "action": "UPDATE"},
    {"resource": "permission", "action": "READ"},
    {"resource": "permission", "action": "UPDATE"},
]
