# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for InMemoryGameStore."""

import pytest

from chatplay.domains.gaming.models import Participant, SessionStatus, VariantName
from chatplay.domains.gaming.store import InMemoryGameStore
from chatplay.infrastructure.database.connection import PersistenceError
from chatplay.utils.datetime import utc_now


@pytest.mark.unit
class TestInMemoryGameStore:
    """Tests for the process-local store."""

    async def test_session_lifecycle_timestamps(self, store: InMemoryGameStore) -> None:
        """Test that status changes stamp started_at and ended_at."""
        session = await store.create_game_session(VariantName.TIC_TAC_TOE, llm_model="m")
        assert session.status == SessionStatus.WAITING
        assert session.started_at is None

        await store.update_game_state(session.id, {"board": []}, status=SessionStatus.ACTIVE)
        active = await store.get_game_session(session.id)
        assert active.state == {"board": []}
        assert active.started_at is not None

        await store.update_game_state(session.id, {"board": [1]})
        unchanged = await store.get_game_session(session.id)
        assert unchanged.status == SessionStatus.ACTIVE
        assert unchanged.started_at == active.started_at

        await store.update_game_state(session.id, {"board": [1]}, status=SessionStatus.COMPLETED)
        done = await store.get_game_session(session.id)
        assert done.ended_at is not None

    async def test_returned_records_are_copies(self, store: InMemoryGameStore) -> None:
        """Test that mutating a loaded record does not change the store."""
        session = await store.create_game_session(VariantName.BIG_EATER)
        await store.update_game_state(session.id, {"round": 1})

        loaded = await store.get_game_session(session.id)
        loaded.state["round"] = 99
        loaded.status = SessionStatus.CANCELLED

        again = await store.get_game_session(session.id)
        assert again.state == {"round": 1}
        assert again.status == SessionStatus.WAITING

    async def test_missing_session(self, store: InMemoryGameStore) -> None:
        """Test reads and writes of unknown sessions."""
        assert await store.get_game_session("missing") is None
        assert await store.get_game_players("missing") == []
        assert await store.get_game_moves("missing") == []
        with pytest.raises(PersistenceError):
            await store.update_game_state("missing", {})
        with pytest.raises(PersistenceError):
            await store.record_game_move("missing", 1, "user-1", {})

    async def test_players_sorted_by_slot(
        self, store: InMemoryGameStore, human: Participant, ai: Participant
    ) -> None:
        """Test that players come back ordered by slot and slots are unique."""
        session = await store.create_game_session(VariantName.TIC_TAC_TOE)
        await store.add_game_player(session.id, ai)
        await store.add_game_player(session.id, human)

        players = await store.get_game_players(session.id)
        assert [p.slot for p in players] == [1, 2]

        with pytest.raises(PersistenceError, match="Slot 1 already taken"):
            await store.add_game_player(session.id, human.model_copy(update={"participant_id": "x"}))

    async def test_move_numbers_are_unique(self, store: InMemoryGameStore) -> None:
        """Test that the log refuses a duplicate sequence number."""
        session = await store.create_game_session(VariantName.TIC_TAC_TOE)
        record = await store.record_game_move(session.id, 1, "user-1", {"token": "5"})
        await store.record_game_move(session.id, 2, None, {"token": "1"}, is_ai=True)

        assert record.token == "5"
        with pytest.raises(PersistenceError, match="already recorded"):
            await store.record_game_move(session.id, 2, "user-1", {"token": "9"})

        moves = await store.get_game_moves(session.id)
        assert [(m.move_number, m.is_ai) for m in moves] == [(1, False), (2, True)]

    async def test_active_sessions_skip_left_players(
        self, store: InMemoryGameStore, human: Participant, ai: Participant
    ) -> None:
        """Test that a player who left no longer sees the session."""
        session = await store.create_game_session(VariantName.TIC_TAC_TOE)
        await store.add_game_player(session.id, human)
        await store.add_game_player(session.id, ai)
        await store.update_game_state(session.id, {}, status=SessionStatus.ACTIVE)

        assert [s.id for s in await store.list_active_sessions("user-1")] == [session.id]

        await store.mark_player_left(session.id, "user-1", utc_now())

        assert await store.list_active_sessions("user-1") == []
        assert [s.id for s in await store.list_active_sessions("ai:user-1")] == [session.id]

    async def test_player_results_accumulate(self, store: InMemoryGameStore) -> None:
        """Test per-variant stats."""
        await store.record_player_result("user-1", VariantName.TIC_TAC_TOE, won=True, lost=False)
        await store.record_player_result("user-1", VariantName.TIC_TAC_TOE, won=False, lost=True)
        await store.record_player_result("user-1", VariantName.TIC_TAC_TOE, won=False, lost=False)

        stats = store.stats[("user-1", VariantName.TIC_TAC_TOE)]
        assert (stats["games_played"], stats["games_won"], stats["games_lost"]) == (3, 1, 1)
        assert stats["last_played"] is not None
        assert ("user-1", VariantName.BIG_EATER) not in store.stats
