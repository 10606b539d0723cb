# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Turn an authorization decision into a SQL constraint.

``apply_filter`` ANDs the scope predicate for the current decision with any
business predicates. ALL adds no restriction, OWN restricts rows to those
owned by the current user, and anything else (DENIED, no decision, no user,
entity without a registered owner column) matches no rows.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import sqlalchemy as sa
from sqlalchemy import and_, or_
from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

from src.rbac import context
from src.rbac.context import FilterDecision
from src.rbac.filters import EffectiveFilter

logger = logging.getLogger(__name__)

QueryT = TypeVar("QueryT", Query, sa.Select)

OwnerColumnAccessor = Callable[[type[Any]], ColumnElement]


class OwnershipRegistry:
    """Maps entities to the column that identifies their owning user."""

    def __init__(self) -> None:
        self._accessors: dict[type[Any], OwnerColumnAccessor] = {}

    def register(self, entity: type[Any], owner: str | OwnerColumnAccessor) -> None:
        """Register the owner column of an entity, by name or accessor."""
        if isinstance(owner, str):
            column_name = owner
            if column_name not in entity.__table__.columns.keys():
                raise ValueError(
                    f"{entity.__name__} has no column named '{column_name}'"
                )

            def accessor(model: type[Any]) -> ColumnElement:
                return getattr(model, column_name)

            self._accessors[entity] = accessor
        else:
            self._accessors[entity] = owner

    def is_registered(self, entity: type[Any]) -> bool:
        return entity in self._accessors

    def owner_column(self, entity: type[Any]) -> ColumnElement | None:
        accessor = self._accessors.get(entity)
        if accessor is None:
            return None
        return accessor(entity)


ownership_registry = OwnershipRegistry()


def scope_predicate(
    entity: type[Any],
    decision: FilterDecision | None = None,
    registry: OwnershipRegistry | None = None,
) -> ColumnElement[bool]:
    """Build the row predicate for ``entity`` under ``decision``.

    When ``decision`` is omitted the decision held by the current call is
    used.
    """
    if decision is None:
        decision = context.get_decision()
    registry = registry or ownership_registry

    if decision is None:
        logger.warning(
            f"No authorization decision in context for {entity.__name__}, "
            "denying all rows"
        )
        return sa.false()

    if decision.effective_filter is EffectiveFilter.ALL:
        return sa.true()

    if decision.effective_filter is EffectiveFilter.OWN:
        if decision.user is None:
            logger.warning(
                f"OWN scope on {entity.__name__} without a user, denying all rows"
            )
            return sa.false()
        owner_column = registry.owner_column(entity)
        if owner_column is None:
            logger.warning(
                f"{entity.__name__} has no registered owner column, "
                "denying all rows for OWN scope"
            )
            return sa.false()
        return owner_column == decision.user.id

    return sa.false()


def query_entity(query: Query | sa.Select) -> type[Any]:
    """Return the first mapped entity selected by ``query``."""
    descriptions = query.column_descriptions
    entity = descriptions[0].get("entity") if descriptions else None
    if entity is None:
        raise ValueError("Cannot infer the entity of the query; pass entity=")
    return entity


def apply_filter(
    query: QueryT,
    *predicates: ColumnElement[bool],
    entity: type[Any] | None = None,
    decision: FilterDecision | None = None,
) -> QueryT:
    """Constrain ``query`` by the authorization scope and business predicates.

    Works on both ``Session.query(...)`` objects and 2.0 ``select(...)``
    statements. ``decision`` must be passed explicitly when the query is
    built outside the call that made the permission check.
    """
    if entity is None:
        entity = query_entity(query)
    return query.where(and_(scope_predicate(entity, decision), *predicates))


def register_ownership_columns() -> None:
    """Register owner columns for the built-in entities."""
    from src.models import Course, Review

    ownership_registry.register(Course, "instructor_id")
    ownership_registry.register(Review, "user_id")


register_ownership_columns()


__all__ = [
    "OwnershipRegistry",
    "and_",
    "apply_filter",
    "or_",
    "ownership_registry",
    "query_entity",
    "register_ownership_columns",
    "scope_predicate",
]
