# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Effective filter values and the rule that combines them."""

from collections.abc import Iterable
from enum import Enum
from functools import reduce

from src.models.enums import FilterType


class EffectiveFilter(str, Enum):
    """Resolved data scope of a permission check.

    Ordered ``DENIED < OWN < ALL``; combining two filters keeps the more
    permissive one.
    """

    DENIED = "DENIED"
    OWN = "OWN"
    ALL = "ALL"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def allows_access(self) -> bool:
        return self is not EffectiveFilter.DENIED

    @classmethod
    def from_filter_type(cls, filter_type: FilterType) -> "EffectiveFilter":
        return cls(FilterType(filter_type).value)

    def __lt__(self, other):
        if not isinstance(other, EffectiveFilter):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, EffectiveFilter):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, EffectiveFilter):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, EffectiveFilter):
            return NotImplemented
        return self.rank >= other.rank


_RANKS = {
    EffectiveFilter.DENIED: 0,
    EffectiveFilter.OWN: 1,
    EffectiveFilter.ALL: 2,
}


def combine(left: EffectiveFilter, right: EffectiveFilter) -> EffectiveFilter:
    """Combine two filters, keeping the more permissive scope."""
    return left if left >= right else right


def reduce_filters(
    filters: Iterable[EffectiveFilter | FilterType],
) -> EffectiveFilter:
    """Fold any number of filters into one. No filters means DENIED."""
    return reduce(
        combine,
        (
            f if isinstance(f, EffectiveFilter) else EffectiveFilter.from_filter_type(f)
            for f in filters
        ),
        EffectiveFilter.DENIED,
    )
