# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Course and review reads constrained by the caller's data scope."""

import logging
import uuid

from sqlalchemy.orm import Session

from src.models import Course, Review, User
from src.rbac.query import apply_filter
from src.services.authorization_service import authorized

logger = logging.getLogger(__name__)


def list_courses(
    db: Session,
    user: User,
    category: str | None = None,
    published_only: bool = False,
) -> list[Course]:
    """Courses visible to ``user`` under ``course:READ``."""
    predicates = [Course.is_deleted.is_(False)]
    if category:
        predicates.append(Course.category == category)
    if published_only:
        predicates.append(Course.is_published.is_(True))

    with authorized(db, user, "course:READ"):
        return apply_filter(db.query(Course), *predicates).order_by(Course.title).all()


def get_course(db: Session, user: User, course_id: uuid.UUID) -> Course | None:
    """A single course, or None when it is missing or out of scope."""
    with authorized(db, user, "course:READ"):
        return apply_filter(
            db.query(Course), Course.id == course_id, Course.is_deleted.is_(False)
        ).first()


def list_reviews(
    db: Session, user: User, course_id: uuid.UUID | None = None
) -> list[Review]:
    predicates = []
    if course_id is not None:
        predicates.append(Review.course_id == course_id)

    with authorized(db, user, "review:READ"):
        return apply_filter(db.query(Review), *predicates).order_by(
            Review.created_at
        ).all()


def delete_review(db: Session, user: User, review_id: uuid.UUID) -> bool:
    """Delete a review if the caller's ``review:DELETE`` scope covers it."""
    with authorized(db, user, "review:DELETE"):
        review = apply_filter(db.query(Review), Review.id == review_id).first()
    if not review:
        return False
    db.delete(review)
    db.commit()
    logger.info(f"User {user.username} deleted review {review_id}")
    return True
