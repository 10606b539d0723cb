# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Call-scoped holder for the current authorization decision.

Every thread and every asyncio task sees its own value, so a decision made
while serving one request is never visible to another. FastAPI and anyio
run sync code on a copy of the caller's context. Work handed to a raw
``concurrent.futures`` executor must be submitted as
``executor.submit(contextvars.copy_context().run, fn, ...)``; a plain
``submit`` runs in the worker thread's own context, which keeps whatever
an earlier job left there.

Prefer ``effective_filter_scope`` over ``set_decision``/``clear``: it
restores the previous value on every exit path.
"""

from __future__ import annotations

import contextvars
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.rbac.filters import EffectiveFilter

if TYPE_CHECKING:
    from src.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterDecision:
    """Immutable result handed from the permission check to query building."""

    effective_filter: EffectiveFilter
    user: User | None

    @property
    def user_id(self):
        return self.user.id if self.user is not None else None


_decision_var: contextvars.ContextVar[FilterDecision | None] = contextvars.ContextVar(
    "src.rbac.context.decision", default=None
)


def set_decision(
    effective_filter: EffectiveFilter, user: User | None
) -> contextvars.Token:
    """Publish a decision for the current call. Returns a token for ``reset``."""
    decision = FilterDecision(effective_filter=effective_filter, user=user)
    logger.debug(f"Decision context set to {effective_filter.value}")
    return _decision_var.set(decision)


def reset(token: contextvars.Token) -> None:
    _decision_var.reset(token)


def get_decision() -> FilterDecision | None:
    return _decision_var.get()


def get_effective_filter() -> EffectiveFilter | None:
    decision = _decision_var.get()
    return decision.effective_filter if decision is not None else None


def get_current_user() -> User | None:
    decision = _decision_var.get()
    return decision.user if decision is not None else None


def has_context() -> bool:
    return _decision_var.get() is not None


def clear() -> None:
    """Drop any decision held by the current call."""
    _decision_var.set(None)


@contextmanager
def effective_filter_scope(
    effective_filter: EffectiveFilter, user: User | None
) -> Iterator[FilterDecision]:
    """Hold a decision for the duration of a ``with`` block."""
    token = set_decision(effective_filter, user)
    try:
        yield _decision_var.get()
    finally:
        _decision_var.reset(token)


__all__ = [
    "FilterDecision",
    "clear",
    "effective_filter_scope",
    "get_current_user",
    "get_decision",
    "get_effective_filter",
    "has_context",
    "reset",
    "set_decision",
]
