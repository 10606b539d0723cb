# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for turning decisions into query constraints."""

import pytest
from sqlalchemy import select

from src.models import Course, Role, User
from src.rbac import context
from src.rbac.context import FilterDecision
from src.rbac.filters import EffectiveFilter
from src.rbac.query import (
    OwnershipRegistry,
    apply_filter,
    or_,
    ownership_registry,
    scope_predicate,
)
from src.security import get_password_hash


def create_instructor(db_session, username: str) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=get_password_hash("Secret123!"),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def courses(db_session):
    alice = create_instructor(db_session, "alice")
    bob = create_instructor(db_session, "bob")
    db_session.add_all(
        [
            Course(title="Algebra", category="math", instructor_id=alice.id),
            Course(title="Geometry", category="math", instructor_id=alice.id),
            Course(title="Poetry", category="arts", instructor_id=bob.id),
        ]
    )
    db_session.commit()
    return alice, bob


def titles(rows):
    return sorted(course.title for course in rows)


def test_all_scope_returns_every_row(db_session, courses):
    alice, _bob = courses
    with context.effective_filter_scope(EffectiveFilter.ALL, alice):
        rows = apply_filter(db_session.query(Course)).all()
    assert titles(rows) == ["Algebra", "Geometry", "Poetry"]


def test_own_scope_returns_only_owned_rows(db_session, courses):
    _alice, bob = courses
    with context.effective_filter_scope(EffectiveFilter.OWN, bob):
        rows = apply_filter(db_session.query(Course)).all()
    assert titles(rows) == ["Poetry"]


def test_denied_scope_returns_nothing(db_session, courses):
    alice, _bob = courses
    with context.effective_filter_scope(EffectiveFilter.DENIED, alice):
        assert apply_filter(db_session.query(Course)).all() == []


def test_missing_context_denies_instead_of_returning_everything(db_session, courses):
    context.set_decision(EffectiveFilter.ALL, courses[0])
    context.clear()
    assert apply_filter(db_session.query(Course)).all() == []


def test_own_without_user_denies(db_session, courses):
    with context.effective_filter_scope(EffectiveFilter.OWN, None):
        assert apply_filter(db_session.query(Course)).all() == []


def test_own_on_entity_without_owner_column_denies(db_session, courses):
    db_session.add(Role(name="ANY"))
    db_session.commit()
    with context.effective_filter_scope(EffectiveFilter.OWN, courses[0]):
        assert apply_filter(db_session.query(Role)).all() == []
    with context.effective_filter_scope(EffectiveFilter.ALL, courses[0]):
        assert len(apply_filter(db_session.query(Role)).all()) == 1


def test_business_predicates_are_anded(db_session, courses):
    alice, _bob = courses
    with context.effective_filter_scope(EffectiveFilter.ALL, alice):
        rows = apply_filter(
            db_session.query(Course),
            Course.category == "math",
            Course.title != "Geometry",
        ).all()
    assert titles(rows) == ["Algebra"]


def test_business_predicates_cannot_widen_own_scope(db_session, courses):
    _alice, bob = courses
    with context.effective_filter_scope(EffectiveFilter.OWN, bob):
        rows = apply_filter(
            db_session.query(Course),
            or_(Course.category == "math", Course.category == "arts"),
        ).all()
    assert titles(rows) == ["Poetry"]


def test_explicit_decision_overrides_context(db_session, courses):
    alice, _bob = courses
    decision = FilterDecision(EffectiveFilter.OWN, alice)
    rows = apply_filter(db_session.query(Course), decision=decision).all()
    assert titles(rows) == ["Algebra", "Geometry"]


def test_select_statements_are_supported(db_session, courses):
    alice, _bob = courses
    with context.effective_filter_scope(EffectiveFilter.OWN, alice):
        stmt = apply_filter(select(Course), Course.category == "math")
    rows = db_session.scalars(stmt).all()
    assert titles(rows) == ["Algebra", "Geometry"]


def test_scope_predicate_for_all_is_true():
    decision = FilterDecision(EffectiveFilter.ALL, None)
    predicate = scope_predicate(Course, decision)
    assert str(predicate.compile(compile_kwargs={"literal_binds": True})) == "true"


def test_registry_rejects_unknown_column():
    registry = OwnershipRegistry()
    with pytest.raises(ValueError):
        registry.register(Course, "owner_id")


def test_registry_accepts_accessor(db_session, courses):
    alice, _bob = courses
    registry = OwnershipRegistry()
    registry.register(Course, lambda entity: entity.instructor_id)
    decision = FilterDecision(EffectiveFilter.OWN, alice)

    rows = (
        db_session.query(Course)
        .where(scope_predicate(Course, decision, registry=registry))
        .all()
    )
    assert titles(rows) == ["Algebra", "Geometry"]


def test_default_registrations():
    assert ownership_registry.is_registered(Course)
    assert not ownership_registry.is_registered(Role)
