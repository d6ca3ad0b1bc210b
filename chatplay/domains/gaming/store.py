# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Persistence interface for game sessions.

The session engine talks to storage only through GameStore. Each method
is a single atomic operation; the engine never needs a multi-statement
transaction. Implementations raise PersistenceError on storage failures.

Implementations:
- SQLAlchemyGameStore (chatplay.infrastructure.database.game_store)
- InMemoryGameStore (below): process-local, for tests and local runs
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Protocol

from chatplay.domains.gaming.models import (
    GameSessionRecord,
    MoveRecord,
    Participant,
    SessionStatus,
    VariantName,
)
from chatplay.infrastructure.database.connection import PersistenceError
from chatplay.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class GameStore(Protocol):
    """Storage operations used by the session engine."""

    async def create_game_session(
        self,
        variant: VariantName,
        llm_model: str | None = None,
    ) -> GameSessionRecord:
        """Create a session in waiting status with an empty state."""
        ...

    async def get_game_session(self, session_id: str) -> GameSessionRecord | None:
        """Load a session, None if it does not exist."""
        ...

    async def update_game_state(
        self,
        session_id: str,
        state: dict[str, Any],
        status: SessionStatus | None = None,
    ) -> None:
        """Store a new state and optionally a new status.

        Moving to active stamps started_at once; moving to completed or
        cancelled stamps ended_at.
        """
        ...

    async def record_winner(self, session_id: str, winner_id: str | None) -> None:
        """Store the winning participant id."""
        ...

    async def add_game_player(self, session_id: str, participant: Participant) -> None:
        """Attach a participant to a session."""
        ...

    async def get_game_players(self, session_id: str) -> list[Participant]:
        """List participants ordered by slot, including those who left."""
        ...

    async def mark_player_left(
        self,
        session_id: str,
        participant_id: str,
        left_at: datetime,
    ) -> None:
        """Stamp when a participant left the session."""
        ...

    async def record_game_move(
        self,
        session_id: str,
        move_number: int,
        participant_id: str | None,
        move_data: dict[str, Any],
        is_ai: bool = False,
    ) -> MoveRecord:
        """Append an entry to the move log."""
        ...

    async def get_game_moves(self, session_id: str) -> list[MoveRecord]:
        """List the move log, oldest first."""
        ...

    async def list_active_sessions(self, participant_id: str) -> list[GameSessionRecord]:
        """List active sessions a participant is seated in and has not left."""
        ...

    async def record_player_result(
        self,
        participant_id: str,
        variant: VariantName,
        won: bool,
        lost: bool,
    ) -> None:
        """Add one finished game to a participant's stats."""
        ...


class InMemoryGameStore:
    """GameStore kept in process memory.

    Records are copied on the way in and out so callers cannot mutate
    stored data behind the store's back.

    Example:
        store = InMemoryGameStore()
        service = GameSessionService(store=store, generator=generator)
    """

    def __init__(self) -> None:
        self._sessions: dict[str, GameSessionRecord] = {}
        self._players: dict[str, list[Participant]] = {}
        self._moves: dict[str, list[MoveRecord]] = {}
        self.stats: dict[tuple[str, VariantName], dict[str, Any]] = {}

    def _require(self, session_id: str) -> GameSessionRecord:
        session = self._sessions.get(session_id)
        if session is None:
            raise PersistenceError(f"Game session {session_id} does not exist")
        return session

    async def create_game_session(
        self,
        variant: VariantName,
        llm_model: str | None = None,
    ) -> GameSessionRecord:
        session = GameSessionRecord(
            id=str(uuid.uuid4()),
            variant=variant,
            status=SessionStatus.WAITING,
            llm_model=llm_model,
        )
        self._sessions[session.id] = session
        self._players[session.id] = []
        self._moves[session.id] = []
        return session.model_copy(deep=True)

    async def get_game_session(self, session_id: str) -> GameSessionRecord | None:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    async def update_game_state(
        self,
        session_id: str,
        state: dict[str, Any],
        status: SessionStatus | None = None,
    ) -> None:
        session = self._require(session_id)
        session.state = dict(state)
        if status is not None:
            session.status = status
            if status == SessionStatus.ACTIVE and session.started_at is None:
                session.started_at = utc_now()
            elif status.is_terminal:
                session.ended_at = utc_now()

    async def record_winner(self, session_id: str, winner_id: str | None) -> None:
        self._require(session_id).winner_id = winner_id

    async def add_game_player(self, session_id: str, participant: Participant) -> None:
        self._require(session_id)
        players = self._players[session_id]
        if any(p.slot == participant.slot for p in players):
            raise PersistenceError(
                f"Slot {participant.slot} already taken in session {session_id}"
            )
        players.append(participant.model_copy())

    async def get_game_players(self, session_id: str) -> list[Participant]:
        players = self._players.get(session_id, [])
        return [p.model_copy() for p in sorted(players, key=lambda p: p.slot)]

    async def mark_player_left(
        self,
        session_id: str,
        participant_id: str,
        left_at: datetime,
    ) -> None:
        self._require(session_id)
        for player in self._players[session_id]:
            if player.participant_id == participant_id:
                player.left_at = left_at

    async def record_game_move(
        self,
        session_id: str,
        move_number: int,
        participant_id: str | None,
        move_data: dict[str, Any],
        is_ai: bool = False,
    ) -> MoveRecord:
        self._require(session_id)
        moves = self._moves[session_id]
        if any(m.move_number == move_number for m in moves):
            raise PersistenceError(
                f"Move {move_number} already recorded for session {session_id}"
            )
        record = MoveRecord(
            session_id=session_id,
            move_number=move_number,
            participant_id=participant_id,
            is_ai=is_ai,
            payload=dict(move_data),
        )
        moves.append(record)
        return record.model_copy(deep=True)

    async def get_game_moves(self, session_id: str) -> list[MoveRecord]:
        moves = self._moves.get(session_id, [])
        return [m.model_copy(deep=True) for m in sorted(moves, key=lambda m: m.move_number)]

    async def list_active_sessions(self, participant_id: str) -> list[GameSessionRecord]:
        active = []
        for session_id, players in self._players.items():
            session = self._sessions[session_id]
            if session.status != SessionStatus.ACTIVE:
                continue
            if any(p.participant_id == participant_id and not p.has_left for p in players):
                active.append(session.model_copy(deep=True))
        return sorted(active, key=lambda s: s.created_at, reverse=True)

    async def record_player_result(
        self,
        participant_id: str,
        variant: VariantName,
        won: bool,
        lost: bool,
    ) -> None:
        stats = self.stats.setdefault(
            (participant_id, variant),
            {"games_played": 0, "games_won": 0, "games_lost": 0, "last_played": None},
        )
        stats["games_played"] += 1
        stats["games_won"] += int(won)
        stats["games_lost"] += int(lost)
        stats["last_played"] = utc_now()
