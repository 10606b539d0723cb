# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Filter rule administration endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission
from src.models import User
from src.schemas.rbac import FilterRuleCreate, FilterRuleSchema, FilterRuleStatusUpdate
from src.services import filter_rule_service

router = APIRouter()


@router.get("", response_model=list[FilterRuleSchema])
def list_filter_rules(
    role_id: uuid.UUID | None = None,
    permission_key: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:READ")),
):
    """List the rules of a role, or the active rules of a permission key."""
    if role_id is not None:
        return filter_rule_service.list_rules_by_role(db, role_id)
    if permission_key is not None:
        return filter_rule_service.list_rules_by_permission(db, permission_key)
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Either role_id or permission_key is required",
    )


@router.post("", response_model=FilterRuleSchema, status_code=status.HTTP_201_CREATED)
def create_filter_rule(
    data: FilterRuleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
):
    """Attach a scope to a role permission. 409 if it already has an active rule."""
    return filter_rule_service.create_rule(
        db, data.role_permission_id, data.filter_type
    )


@router.patch("/{rule_id}", response_model=FilterRuleSchema)
def update_filter_rule_status(
    rule_id: uuid.UUID,
    data: FilterRuleStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
):
    return filter_rule_service.update_rule_status(db, rule_id, data.is_active)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_filter_rule(
    rule_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("permission:UPDATE")),
) -> Response:
    filter_rule_service.delete_rule(db, rule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
