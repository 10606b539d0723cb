# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for assignment_rule_service."""

import uuid

import pytest

from src.models import FilterType
from src.rbac.errors import AlreadyExistsError, AssignmentNotAllowedError, NotFoundError
from src.rbac.filters import EffectiveFilter
from src.rbac.roles import ADMIN_ROLE, INSTRUCTOR_ROLE
from src.services import (
    assignment_rule_service,
    authorization_service,
    catalog_service,
    rbac_service,
    role_permission_service,
)


@pytest.fixture
def roles(db_session):
    admin = rbac_service.create_role(db_session, "ADMIN")
    instructor = rbac_service.create_role(db_session, "INSTRUCTOR")
    return admin, instructor


@pytest.fixture
def payout_approve(db_session):
    catalog_service.register_resource(db_session, "payout", "Payout")
    catalog_service.register_action(db_session, "APPROVE", "Approve")
    permission = catalog_service.register_permission(db_session, "payout", "APPROVE")
    db_session.commit()
    return permission


def test_unrestricted_permission_can_go_to_any_role(db_session, roles, payout_approve):
    _admin, instructor = roles
    assert assignment_rule_service.is_restricted(db_session, payout_approve.id) is False
    assert assignment_rule_service.can_assign(
        db_session, instructor.id, payout_approve.id
    )
    assert assignment_rule_service.list_allowed_role_names(
        db_session, payout_approve.id
    ) == []


def test_restricted_permission_truth_table(db_session, roles, payout_approve):
    admin, instructor = roles
    assignment_rule_service.create_assignment_rule(
        db_session, admin.id, payout_approve.id
    )

    assert assignment_rule_service.is_restricted(db_session, payout_approve.id)
    assert assignment_rule_service.can_assign(db_session, admin.id, payout_approve.id)
    assert not assignment_rule_service.can_assign(
        db_session, instructor.id, payout_approve.id
    )
    assert assignment_rule_service.list_allowed_role_names(
        db_session, payout_approve.id
    ) == ["ADMIN"]


def test_inactive_rule_does_not_restrict(db_session, roles, payout_approve):
    admin, instructor = roles
    rule = assignment_rule_service.create_assignment_rule(
        db_session, admin.id, payout_approve.id, is_active=False
    )
    assert not assignment_rule_service.is_restricted(db_session, payout_approve.id)
    assert assignment_rule_service.can_assign(
        db_session, instructor.id, payout_approve.id
    )

    assignment_rule_service.update_assignment_rule_status(db_session, rule.id, True)
    assert not assignment_rule_service.can_assign(
        db_session, instructor.id, payout_approve.id
    )


def test_allowed_role_names_are_sorted(db_session, roles, payout_approve):
    admin, instructor = roles
    finance = rbac_service.create_role(db_session, "FINANCE")
    for role in (instructor, finance, admin):
        assignment_rule_service.create_assignment_rule(
            db_session, role.id, payout_approve.id
        )
    assert assignment_rule_service.list_allowed_role_names(
        db_session, payout_approve.id
    ) == ["ADMIN", "FINANCE", "INSTRUCTOR"]


def test_validate_assignment_raises(db_session, roles, payout_approve):
    admin, instructor = roles
    assignment_rule_service.create_assignment_rule(
        db_session, admin.id, payout_approve.id
    )

    assignment_rule_service.validate_assignment(db_session, admin.id, payout_approve.id)
    with pytest.raises(AssignmentNotAllowedError) as exc_info:
        assignment_rule_service.validate_assignment(
            db_session, instructor.id, payout_approve.id
        )
    assert exc_info.value.allowed_roles == ["ADMIN"]
    assert exc_info.value.permission_key == "payout:APPROVE"
    assert exc_info.value.role_name == "INSTRUCTOR"


def test_duplicate_assignment_rule(db_session, roles, payout_approve):
    admin, _instructor = roles
    assignment_rule_service.create_assignment_rule(
        db_session, admin.id, payout_approve.id
    )
    with pytest.raises(AlreadyExistsError):
        assignment_rule_service.create_assignment_rule(
            db_session, admin.id, payout_approve.id
        )


def test_assignment_rule_for_unknown_role(db_session, payout_approve):
    with pytest.raises(NotFoundError):
        assignment_rule_service.create_assignment_rule(
            db_session, uuid.uuid4(), payout_approve.id
        )


def test_update_unknown_assignment_rule(db_session):
    with pytest.raises(NotFoundError):
        assignment_rule_service.update_assignment_rule_status(
            db_session, uuid.uuid4(), False
        )


def test_seeded_payout_approval_is_admin_only(seeded_db):
    admin = rbac_service.get_role_by_name(seeded_db, ADMIN_ROLE)
    instructor = rbac_service.get_role_by_name(seeded_db, INSTRUCTOR_ROLE)
    permission = catalog_service.get_permission_by_key(seeded_db, "payout:APPROVE")

    assert assignment_rule_service.can_assign(seeded_db, admin.id, permission.id)
    assert not assignment_rule_service.can_assign(
        seeded_db, instructor.id, permission.id
    )
    with pytest.raises(AssignmentNotAllowedError):
        role_permission_service.assign_permission_to_role(
            seeded_db, instructor.id, "payout:APPROVE", FilterType.OWN
        )


def test_guard_does_not_revoke_existing_grants(seeded_db, instructor_user):
    instructor = rbac_service.get_role_by_name(seeded_db, INSTRUCTOR_ROLE)
    admin = rbac_service.get_role_by_name(seeded_db, ADMIN_ROLE)
    permission = catalog_service.get_permission_by_key(seeded_db, "course:READ")

    # Restricting course:READ to ADMIN after the fact leaves the instructor grant
    assignment_rule_service.create_assignment_rule(seeded_db, admin.id, permission.id)

    assert not assignment_rule_service.can_assign(
        seeded_db, instructor.id, permission.id
    )
    assert (
        authorization_service.get_effective_filter(
            seeded_db, instructor_user, "course:READ"
        )
        is EffectiveFilter.OWN
    )


def test_list_restricted_permissions(seeded_db):
    restricted = {
        permission.permission_key: allowed
        for permission, allowed in assignment_rule_service.list_restricted_permissions(
            seeded_db
        )
    }
    assert restricted["payout:APPROVE"] == ["ADMIN"]
    assert restricted["refund:APPROVE"] == ["ADMIN"]
    assert "course:READ" not in restricted


def test_list_available_permissions(seeded_db):
    instructor = rbac_service.get_role_by_name(seeded_db, INSTRUCTOR_ROLE)
    available = {
        item.permission.permission_key: item
        for item in assignment_rule_service.list_available_permissions(
            seeded_db, instructor.id
        )
    }

    assert available["payout:APPROVE"].is_restricted is True
    assert available["payout:APPROVE"].can_assign is False
    assert available["payout:APPROVE"].allowed_roles == ["ADMIN"]
    assert available["course:READ"].is_restricted is False
    assert available["course:READ"].can_assign is True


def test_list_available_permissions_unknown_role(seeded_db):
    with pytest.raises(NotFoundError):
        assignment_rule_service.list_available_permissions(seeded_db, uuid.uuid4())
