# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for game persistence.

Tables:
- game_sessions: One row per played session, holding the serialized state
- game_players: Seats in a session (human or AI)
- game_moves: Append-only move log
- user_stats: Per-player results per variant
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatplay.infrastructure.database.models.base import Base, JSONType, TimestampMixin
from chatplay.utils.datetime import utc_now


def _new_id() -> str:
    return str(uuid.uuid4())


class GameSession(Base, TimestampMixin):
    """A game session.

    Status moves waiting -> active -> completed | cancelled.
    Rows are never deleted.
    """

    __tablename__ = "game_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    game_type: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="waiting",
        index=True,
    )
    game_state_json: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=dict,
    )
    llm_model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    winner_user_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    players: Mapped[list["GamePlayer"]] = relationship(
        back_populates="session",
        order_by="GamePlayer.player_number",
    )
    moves: Mapped[list["GameMove"]] = relationship(
        back_populates="session",
        order_by="GameMove.move_number",
    )

    @property
    def is_active(self) -> bool:
        """Check if the session accepts moves."""
        return self.status == "active"

    def __repr__(self) -> str:
        return f"<GameSession {self.id} {self.game_type} {self.status}>"


class GamePlayer(Base):
    """A seat in a game session."""

    __tablename__ = "game_players"
    __table_args__ = (
        UniqueConstraint("session_id", "player_number", name="uq_game_players_slot"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("game_sessions.id"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    player_number: Mapped[int] = mapped_column(Integer, nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_ai: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    left_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    session: Mapped[GameSession] = relationship(back_populates="players")


class GameMove(Base):
    """An entry of the append-only move log."""

    __tablename__ = "game_moves"
    __table_args__ = (
        UniqueConstraint("session_id", "move_number", name="uq_game_moves_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("game_sessions.id"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    move_number: Mapped[int] = mapped_column(Integer, nullable=False)
    move_data_json: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=dict,
    )
    is_ai_move: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    session: Mapped[GameSession] = relationship(back_populates="moves")


class UserStats(Base, TimestampMixin):
    """Per-player results for one variant."""

    __tablename__ = "user_stats"
    __table_args__ = (
        UniqueConstraint("user_id", "game_type", name="uq_user_stats_game"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    game_type: Mapped[str] = mapped_column(String(30), nullable=False)
    games_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    games_won: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    games_lost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_played: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def games_drawn(self) -> int:
        """Games that ended without a result for this player."""
        return self.games_played - self.games_won - self.games_lost
