# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Course and review endpoints scoped by the caller's effective filter."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission
from src.models import User
from src.schemas.course import CourseResponse, ReviewResponse
from src.services import course_service

router = APIRouter()


@router.get("/courses", response_model=list[CourseResponse])
def list_courses(
    category: str | None = None,
    published_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("course:READ")),
):
    return course_service.list_courses(
        db, current_user, category=category, published_only=published_only
    )


@router.get("/courses/{course_id}", response_model=CourseResponse)
def get_course(
    course_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("course:READ")),
):
    course = course_service.get_course(db, current_user, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return course


@router.get("/reviews", response_model=list[ReviewResponse])
def list_reviews(
    course_id: uuid.UUID | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("review:READ")),
):
    return course_service.list_reviews(db, current_user, course_id=course_id)


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("review:DELETE")),
) -> Response:
    if not course_service.delete_review(db, current_user, review_id):
        raise HTTPException(status_code=404, detail="Review not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
