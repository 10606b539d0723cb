# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for rbac_service."""

import uuid

import pytest

from src.models import FilterRule, PermissionRoleAssignRule, RolePermission
from src.rbac.errors import AlreadyExistsError, NotFoundError, SystemRoleError
from src.rbac.roles import ADMIN_ROLE, INSTRUCTOR_ROLE, STUDENT_ROLE
from src.services import (
    assignment_rule_service,
    catalog_service,
    rbac_service,
    role_permission_service,
)


@pytest.fixture
def moderator(seeded_db):
    return rbac_service.create_role(seeded_db, "MODERATOR", description="Moderates")


def test_create_role(moderator):
    assert moderator.name == "MODERATOR"
    assert moderator.description == "Moderates"
    assert moderator.is_system is False


def test_create_duplicate_role(seeded_db, moderator):
    with pytest.raises(AlreadyExistsError):
        rbac_service.create_role(seeded_db, "MODERATOR")


def test_list_roles_sorted_by_name(seeded_db, moderator):
    names = [role.name for role in rbac_service.list_roles(seeded_db)]
    assert names == sorted(names)
    assert {ADMIN_ROLE, INSTRUCTOR_ROLE, STUDENT_ROLE, "MODERATOR"} <= set(names)


def test_update_role(seeded_db, moderator):
    role = rbac_service.update_role(
        seeded_db, moderator.id, name="REVIEWER", description="Reviews content"
    )
    assert role.name == "REVIEWER"
    assert role.description == "Reviews content"
    assert rbac_service.get_role_by_name(seeded_db, "MODERATOR") is None


def test_update_role_keeps_unset_fields(seeded_db, moderator):
    role = rbac_service.update_role(seeded_db, moderator.id, description="Other")
    assert role.name == "MODERATOR"
    assert role.description == "Other"


def test_update_role_name_taken(seeded_db, moderator):
    with pytest.raises(AlreadyExistsError):
        rbac_service.update_role(seeded_db, moderator.id, name=STUDENT_ROLE)


def test_update_unknown_role(seeded_db):
    with pytest.raises(NotFoundError):
        rbac_service.update_role(seeded_db, uuid.uuid4(), name="GHOST")


def test_system_role_cannot_be_modified(seeded_db):
    admin = rbac_service.get_role_by_name(seeded_db, ADMIN_ROLE)
    with pytest.raises(SystemRoleError) as exc_info:
        rbac_service.update_role(seeded_db, admin.id, name="ROOT")
    assert exc_info.value.operation == "modified"
    assert rbac_service.get_role_by_name(seeded_db, ADMIN_ROLE) is not None


def test_system_role_cannot_be_deleted(seeded_db):
    admin = rbac_service.get_role_by_name(seeded_db, ADMIN_ROLE)
    with pytest.raises(SystemRoleError):
        rbac_service.delete_role(seeded_db, admin.id)
    assert rbac_service.get_role(seeded_db, admin.id) is not None


def test_delete_unknown_role(seeded_db):
    with pytest.raises(NotFoundError):
        rbac_service.delete_role(seeded_db, uuid.uuid4())


def test_delete_role_removes_grants_and_guard_rules(seeded_db, moderator, make_user):
    user = make_user("mod", "MODERATOR")
    grant = role_permission_service.assign_permission_to_role(
        seeded_db, moderator.id, "review:DELETE"
    )
    payout_approve = catalog_service.get_permission_by_key(seeded_db, "payout:APPROVE")
    assignment_rule_service.create_assignment_rule(
        seeded_db, moderator.id, payout_approve.id
    )
    grant_id = grant.id
    moderator_id = moderator.id

    rbac_service.delete_role(seeded_db, moderator_id)

    assert rbac_service.get_role(seeded_db, moderator_id) is None
    seeded_db.refresh(user)
    assert user.role_id is None
    assert seeded_db.query(RolePermission).filter_by(role_id=moderator_id).count() == 0
    rules = seeded_db.query(FilterRule).filter_by(role_permission_id=grant_id)
    assert rules.count() == 0
    assert (
        seeded_db.query(PermissionRoleAssignRule)
        .filter_by(role_id=moderator_id)
        .count()
        == 0
    )
    assert assignment_rule_service.is_restricted(seeded_db, payout_approve.id)


def test_assign_and_remove_user_role(seeded_db, make_user, moderator):
    user = make_user("someone")
    assert rbac_service.get_user_role(seeded_db, user) is None

    rbac_service.assign_role_to_user(seeded_db, user.id, moderator.id)
    assert rbac_service.get_user_role(seeded_db, user).name == "MODERATOR"

    rbac_service.remove_role_from_user(seeded_db, user.id)
    assert rbac_service.get_user_role(seeded_db, user) is None


def test_assign_role_replaces_previous_role(seeded_db, student_user, moderator):
    rbac_service.assign_role_to_user(seeded_db, student_user.id, moderator.id)
    assert rbac_service.get_user_role(seeded_db, student_user).name == "MODERATOR"


def test_assign_role_unknown_user_or_role(seeded_db, moderator, student_user):
    with pytest.raises(NotFoundError):
        rbac_service.assign_role_to_user(seeded_db, uuid.uuid4(), moderator.id)
    with pytest.raises(NotFoundError):
        rbac_service.assign_role_to_user(seeded_db, student_user.id, uuid.uuid4())


def test_remove_role_unknown_user(seeded_db):
    with pytest.raises(NotFoundError):
        rbac_service.remove_role_from_user(seeded_db, uuid.uuid4())
