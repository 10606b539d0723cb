# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission model: one (resource, action) pair."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from src.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from src.models.action import Action
    from src.models.resource import Resource
    from src.models.role_permission import RolePermission


class Permission(Base, TimestampMixin):
    """Represents the right to perform an action on a resource.

    The permission key has the form ``resource:action`` (``course:READ``) and
    cannot change once it has been set. A permission is only usable when the
    permission itself, its resource and its action are all active.
    """

    __tablename__ = "permissions"
    __table_args__ = (UniqueConstraint("resource_id", "action_id"),)

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    permission_key: Mapped[str] = mapped_column(
        String(150), unique=True, nullable=False, index=True
    )
    resource_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
    )
    action_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("actions.id", ondelete="CASCADE"),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    resource: Mapped[Resource] = relationship("Resource", back_populates="permissions")
    action: Mapped[Action] = relationship("Action", back_populates="permissions")
    role_permissions: Mapped[list[RolePermission]] = relationship(
        "RolePermission", back_populates="permission"
    )

    @validates("permission_key")
    def validate_permission_key(self, key: str, value: str) -> str:
        if self.permission_key is not None and self.permission_key != value:
            raise ValueError("permission_key cannot be changed once set")
        return value

    @property
    def is_usable(self) -> bool:
        """True when the permission, its resource and its action are active."""
        return bool(
            self.is_active and self.resource.is_active and self.action.is_active
        )
