# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""User schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr

from src.rbac.filters import EffectiveFilter


class UserResponse(BaseModel):
    """User as returned to the user themselves."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: EmailStr
    full_name: str | None = None
    is_active: bool
    role: str | None = None
    # permission key -> effective filter
    permissions: dict[str, EffectiveFilter] = {}
    created_at: datetime
