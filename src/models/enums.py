# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models."""

from enum import Enum


class FilterType(str, Enum):
    """Data scope a filter rule grants.

    There is deliberately no DENIED member: a denial is the absence of an
    applicable rule and is never stored.
    """

    OWN = "OWN"
    ALL = "ALL"


class ActionType(str, Enum):
    """Action type enumeration."""

    CRUD = "CRUD"
    BUSINESS = "BUSINESS"
    CUSTOM = "CUSTOM"
