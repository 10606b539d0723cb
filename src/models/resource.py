# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Protected resource model (course, payment, review, ...)."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from src.models.permission import Permission


class Resource(Base, TimestampMixin):
    """A protected resource, optionally nested under a parent resource.

    The parent link is only used to display resources as a tree. It never
    grants access to child resources at runtime.
    """

    __tablename__ = "resources"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    parent_resource_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("resources.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    parent: Mapped[Resource | None] = relationship(
        "Resource", remote_side=[id], back_populates="children"
    )
    children: Mapped[list[Resource]] = relationship(
        "Resource", back_populates="parent"
    )
    permissions: Mapped[list[Permission]] = relationship(
        "Permission", back_populates="resource"
    )
