# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database models.

Tests model definitions, constraints, and helper methods.
"""

from sqlalchemy import UniqueConstraint

from chatplay.infrastructure.database.models import (
    Base,
    GameMove,
    GamePlayer,
    GameSession,
    TimestampMixin,
    UserStats,
)


def unique_constraints(model: type) -> dict[str, list[str]]:
    """Map constraint names to their column names."""
    return {
        constraint.name: [column.name for column in constraint.columns]
        for constraint in model.__table__.constraints
        if isinstance(constraint, UniqueConstraint)
    }


class TestBase:
    """Test base model functionality."""

    def test_base_inherits_declarative_base(self):
        """Verify Base is a declarative base."""
        assert hasattr(Base, "metadata")
        assert hasattr(Base, "registry")

    def test_timestamp_mixin_has_created_at(self):
        """Verify TimestampMixin has created_at field."""
        assert hasattr(TimestampMixin, "created_at")
        assert hasattr(TimestampMixin, "updated_at")

    def test_all_tables_registered(self):
        """Verify every game table is in the metadata."""
        assert set(Base.metadata.tables) == {
            "game_sessions",
            "game_players",
            "game_moves",
            "user_stats",
        }


class TestGameModels:
    """Test game persistence models."""

    def test_game_session_columns(self):
        """Verify GameSession keeps state, model and winner."""
        columns = GameSession.__table__.columns

        assert GameSession.__tablename__ == "game_sessions"
        assert "game_state_json" in columns
        assert "llm_model" in columns
        assert "winner_user_id" in columns
        assert columns["status"].index is True
        assert columns["ended_at"].nullable is True

    def test_game_session_is_active(self):
        """Verify the is_active helper."""
        assert GameSession(game_type="tic_tac_toe", status="active").is_active is True
        assert GameSession(game_type="tic_tac_toe", status="completed").is_active is False

    def test_player_slot_is_unique_per_session(self):
        """Verify a slot can only be taken once."""
        assert unique_constraints(GamePlayer)["uq_game_players_slot"] == [
            "session_id",
            "player_number",
        ]

    def test_move_number_is_unique_per_session(self):
        """Verify the move log has one entry per sequence number."""
        assert unique_constraints(GameMove)["uq_game_moves_number"] == [
            "session_id",
            "move_number",
        ]
        assert GameMove.__table__.columns["user_id"].nullable is True

    def test_user_stats_unique_per_game(self):
        """Verify stats are kept per player and variant."""
        assert unique_constraints(UserStats)["uq_user_stats_game"] == ["user_id", "game_type"]

    def test_games_drawn(self):
        """Verify draws are derived from the other counters."""
        stats = UserStats(
            user_id="user-1",
            game_type="big_eater",
            games_played=5,
            games_won=2,
            games_lost=1,
        )

        assert stats.games_drawn == 2
