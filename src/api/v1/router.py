# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from src.api.v1 import auth, courses, filter_rules, rbac

api_router = APIRouter()

# Auth routes
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# RBAC administration routes
api_router.include_router(rbac.router, tags=["rbac"])

# Filter rule routes
api_router.include_router(
    filter_rules.router, prefix="/filter-rules", tags=["filter-rules"]
)

# Scoped course and review routes
api_router.include_router(courses.router, tags=["courses"])
