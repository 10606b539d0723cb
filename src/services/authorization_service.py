# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authorization engine: resolve a user's effective filter for a permission.

Every applicable filter rule of the user's role is combined and the most
permissive scope wins. No applicable rule means DENIED. A denial is an
ordinary result; database failures are not turned into denials and
propagate to the caller.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy.orm import Session

from src.models import User
from src.rbac.context import effective_filter_scope
from src.rbac.filters import EffectiveFilter, reduce_filters
from src.services import filter_rule_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of a permission check."""

    permission_key: str
    has_permission: bool
    effective_filter: EffectiveFilter

    @classmethod
    def allowed(
        cls, permission_key: str, effective_filter: EffectiveFilter
    ) -> "AuthorizationResult":
        return cls(permission_key, True, effective_filter)

    @classmethod
    def denied(cls, permission_key: str) -> "AuthorizationResult":
        return cls(permission_key, False, EffectiveFilter.DENIED)


def evaluate_permission(
    db: Session, user: User | None, permission_key: str
) -> AuthorizationResult:
    if user is None or not user.is_active:
        logger.debug(f"Denied {permission_key}: no active user")
        return AuthorizationResult.denied(permission_key)
    if user.role_id is None:
        logger.debug(f"Denied {permission_key} for {user.username}: no role")
        return AuthorizationResult.denied(permission_key)

    filter_types = filter_rule_service.find_active_rules_for(
        db, user.id, permission_key
    )
    effective = reduce_filters(filter_types)
    if not effective.allows_access:
        logger.debug(f"Denied {permission_key} for {user.username}: no active rule")
        return AuthorizationResult.denied(permission_key)

    logger.debug(f"Granted {permission_key} to {user.username} ({effective.value})")
    return AuthorizationResult.allowed(permission_key, effective)


def has_permission(db: Session, user: User | None, permission_key: str) -> bool:
    return evaluate_permission(db, user, permission_key).has_permission


def get_effective_filter(
    db: Session, user: User | None, permission_key: str
) -> EffectiveFilter:
    return evaluate_permission(db, user, permission_key).effective_filter


def has_permission_with_all_access(
    db: Session, user: User | None, permission_key: str
) -> bool:
    """True only when the user may see every row, not just their own."""
    return get_effective_filter(db, user, permission_key) is EffectiveFilter.ALL


def get_user_permissions(db: Session, user: User | None) -> dict[str, EffectiveFilter]:
    """Effective filter of every permission the user currently holds."""
    if user is None or not user.is_active or user.role_id is None:
        return {}

    scopes: dict[str, list] = {}
    for permission_key, filter_type in filter_rule_service.find_active_rules_for_role(
        db, user.role_id
    ):
        scopes.setdefault(permission_key, []).append(filter_type)
    return {key: reduce_filters(types) for key, types in sorted(scopes.items())}


@contextmanager
def authorized(
    db: Session, user: User | None, permission_key: str
) -> Iterator[AuthorizationResult]:
    """Check a permission and hold the decision while the block runs.

    Queries built inside the block with ``apply_filter`` are constrained by
    the decision; a denied check makes them match nothing.
    """
    result = evaluate_permission(db, user, permission_key)
    with effective_filter_scope(result.effective_filter, user):
        yield result
