# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Integration tests for scoped course and review endpoints."""

import uuid

import pytest

from src.models import Course, Review
from src.rbac import context

PASSWORD = "password123"  # noqa: S105


def login(client, username: str) -> None:
    response = client.post(
        "/api/v1/auth/login", json={"username": username, "password": PASSWORD}
    )
    assert response.status_code == 200


@pytest.fixture
def courses(make_user, seeded_db, instructor_user, student_user):
    other = make_user("other-instructor", "INSTRUCTOR")
    own = Course(title="Algebra", category="math", instructor_id=instructor_user.id)
    foreign = Course(title="Poetry", category="arts", instructor_id=other.id)
    seeded_db.add_all([own, foreign])
    seeded_db.flush()
    review = Review(course_id=foreign.id, user_id=student_user.id, rating=4)
    seeded_db.add(review)
    seeded_db.commit()
    return {"own": own, "foreign": foreign, "review": review}


def test_instructor_lists_only_own_courses(client, instructor_user, courses):
    login(client, instructor_user.username)
    response = client.get("/api/v1/courses")
    assert response.status_code == 200
    assert [course["title"] for course in response.json()] == ["Algebra"]


def test_instructor_gets_404_for_foreign_course(client, instructor_user, courses):
    login(client, instructor_user.username)
    response = client.get(f"/api/v1/courses/{courses['foreign'].id}")
    assert response.status_code == 404


def test_student_lists_all_courses(client, student_user, courses):
    login(client, student_user.username)
    response = client.get("/api/v1/courses", params={"category": "arts"})
    assert response.status_code == 200
    assert [course["title"] for course in response.json()] == ["Poetry"]


def test_user_without_role_is_forbidden(client, make_user):
    make_user("drifter")
    login(client, "drifter")
    assert client.get("/api/v1/courses").status_code == 403


def test_review_deletion_is_scoped(client, instructor_user, student_user, courses):
    review_id = courses["review"].id

    login(client, instructor_user.username)
    assert client.delete(f"/api/v1/reviews/{review_id}").status_code == 403

    login(client, student_user.username)
    assert client.delete(f"/api/v1/reviews/{uuid.uuid4()}").status_code == 404
    assert client.delete(f"/api/v1/reviews/{review_id}").status_code == 204
    assert client.get("/api/v1/reviews").json() == []


def test_no_decision_leaks_between_requests(client, instructor_user, courses):
    login(client, instructor_user.username)
    client.get("/api/v1/courses")
    assert not context.has_context()

