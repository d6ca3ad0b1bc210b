# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for chatplay."""

from chatplay.infrastructure.database.models.base import Base, JSONType, TimestampMixin
from chatplay.infrastructure.database.models.gaming import (
    GameMove,
    GamePlayer,
    GameSession,
    UserStats,
)

__all__ = [
    "Base",
    "JSONType",
    "TimestampMixin",
    "GameSession",
    "GamePlayer",
    "GameMove",
    "UserStats",
]
