# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Administrative guard restricting which roles may receive a permission."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from src.models.permission import Permission
    from src.models.role import Role


class PermissionRoleAssignRule(Base, TimestampMixin):
    """Allows a role to be granted a restricted permission.

    Once a permission has any active rule, only the roles named by its active
    rules may be granted it. These rows are consulted by admin operations
    only and never affect runtime authorization.
    """

    __tablename__ = "permission_role_assign_rules"
    __table_args__ = (UniqueConstraint("role_id", "permission_id"),)

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    role_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    permission_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    role: Mapped[Role] = relationship("Role")
    permission: Mapped[Permission] = relationship("Permission")
