# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for role_permission_service."""

import uuid

import pytest

from src.models import FilterType
from src.rbac.errors import AssignmentNotAllowedError, NotFoundError
from src.rbac.filters import EffectiveFilter
from src.rbac.roles import INSTRUCTOR_ROLE, STUDENT_ROLE
from src.services import (
    authorization_service,
    catalog_service,
    rbac_service,
    role_permission_service,
)


def active_grants(db_session, role):
    return {
        rp.permission.permission_key: [
            rule.filter_type for rule in rp.filter_rules if rule.is_active
        ]
        for rp in role_permission_service.list_role_permissions(
            db_session, role.id, include_inactive=False
        )
    }


def test_assign_unknown_permission(seeded_db):
    role = rbac_service.get_role_by_name(seeded_db, STUDENT_ROLE)
    with pytest.raises(NotFoundError):
        role_permission_service.assign_permission_to_role(
            seeded_db, role.id, "spaceship:LAUNCH"
        )


def test_assign_inactive_permission(seeded_db):
    role = rbac_service.get_role_by_name(seeded_db, STUDENT_ROLE)
    permission = catalog_service.get_permission_by_key(seeded_db, "discount:READ")
    catalog_service.set_permission_active(seeded_db, permission.id, False)
    with pytest.raises(NotFoundError):
        role_permission_service.assign_permission_to_role(
            seeded_db, role.id, "discount:READ"
        )


def test_assign_to_unknown_role(seeded_db):
    with pytest.raises(NotFoundError):
        role_permission_service.assign_permission_to_role(
            seeded_db, uuid.uuid4(), "course:READ"
        )


def test_set_role_permission_active_unknown(seeded_db):
    with pytest.raises(NotFoundError):
        role_permission_service.set_role_permission_active(
            seeded_db, uuid.uuid4(), False
        )


def test_replace_role_permissions(seeded_db, student_user):
    role = rbac_service.get_role_by_name(seeded_db, STUDENT_ROLE)

    role_permission_service.replace_role_permissions(
        seeded_db,
        role.id,
        [
            ("course:READ", FilterType.OWN),
            ("review:READ", FilterType.ALL),
            ("discount:READ", FilterType.ALL),
        ],
    )

    assert active_grants(seeded_db, role) == {
        "course:READ": [FilterType.OWN],
        "discount:READ": [FilterType.ALL],
        "review:READ": [FilterType.ALL],
    }
    assert (
        authorization_service.get_effective_filter(
            seeded_db, student_user, "course:READ"
        )
        is EffectiveFilter.OWN
    )
    assert not authorization_service.has_permission(
        seeded_db, student_user, "review:DELETE"
    )


def test_replace_keeps_deactivated_rows(seeded_db):
    role = rbac_service.get_role_by_name(seeded_db, STUDENT_ROLE)
    before = len(role_permission_service.list_role_permissions(seeded_db, role.id))

    role_permission_service.replace_role_permissions(
        seeded_db, role.id, [("course:READ", FilterType.ALL)]
    )
    all_rows = role_permission_service.list_role_permissions(seeded_db, role.id)

    assert len(all_rows) == before
    assert [rp.permission.permission_key for rp in all_rows if rp.is_active] == [
        "course:READ"
    ]


def test_replace_reactivates_previous_grant(seeded_db, student_user):
    role = rbac_service.get_role_by_name(seeded_db, STUDENT_ROLE)
    role_permission_service.replace_role_permissions(seeded_db, role.id, [])
    assert not authorization_service.has_permission(
        seeded_db, student_user, "review:DELETE"
    )

    role_permission_service.replace_role_permissions(
        seeded_db, role.id, [("review:DELETE", FilterType.OWN)]
    )

    assert (
        authorization_service.get_effective_filter(
            seeded_db, student_user, "review:DELETE"
        )
        is EffectiveFilter.OWN
    )


def test_replace_checks_guard_before_changing_anything(seeded_db):
    role = rbac_service.get_role_by_name(seeded_db, INSTRUCTOR_ROLE)
    before = active_grants(seeded_db, role)

    with pytest.raises(AssignmentNotAllowedError):
        role_permission_service.replace_role_permissions(
            seeded_db,
            role.id,
            [("course:READ", FilterType.ALL), ("payout:APPROVE", FilterType.ALL)],
        )

    assert active_grants(seeded_db, role) == before


def test_remove_permission_from_role(seeded_db, student_user):
    role = rbac_service.get_role_by_name(seeded_db, STUDENT_ROLE)

    removed = role_permission_service.remove_permission_from_role(
        seeded_db, role.id, "review:DELETE"
    )

    assert [rp.is_active for rp in removed] == [False]
    assert "review:DELETE" not in active_grants(seeded_db, role)
    assert not authorization_service.has_permission(
        seeded_db, student_user, "review:DELETE"
    )


def test_remove_permission_not_held(seeded_db):
    role = rbac_service.get_role_by_name(seeded_db, STUDENT_ROLE)
    with pytest.raises(NotFoundError):
        role_permission_service.remove_permission_from_role(
            seeded_db, role.id, "payout:APPROVE"
        )
