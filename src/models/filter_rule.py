# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Scope declaration attached to a role permission."""

from __future__ import annotations

import uuid as uuid_lib
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin
from src.models.enums import FilterType

if TYPE_CHECKING:
    from src.models.role_permission import RolePermission


class FilterRule(Base, TimestampMixin):
    """Declares the data scope (ALL or OWN) of a role permission.

    Rules are never removed from the table; deleting one sets ``deleted_at``
    and deactivates it.
    """

    __tablename__ = "filter_rules"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    role_permission_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("role_permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    filter_type: Mapped[FilterType] = mapped_column(
        Enum(FilterType, name="filter_type"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    role_permission: Mapped[RolePermission] = relationship(
        "RolePermission", back_populates="filter_rules"
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def permission_key(self) -> str:
        return self.role_permission.permission.permission_key

    @property
    def role_id(self) -> uuid_lib.UUID:
        return self.role_permission.role_id
