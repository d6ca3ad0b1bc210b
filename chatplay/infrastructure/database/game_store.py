# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy implementation of the game store.

Every method opens its own session and commits before returning, so each
call is one atomic unit. SQLAlchemy errors surface as PersistenceError.

Example:
    from chatplay.infrastructure.database import get_sessionmaker
    from chatplay.infrastructure.database.game_store import SQLAlchemyGameStore

    store = SQLAlchemyGameStore(get_sessionmaker())
    session = await store.create_game_session(VariantName.TIC_TAC_TOE)
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chatplay.domains.gaming.models import (
    GameSessionRecord,
    MoveRecord,
    Participant,
    SessionStatus,
    VariantName,
)
from chatplay.infrastructure.database.connection import PersistenceError
from chatplay.infrastructure.database.models import (
    GameMove,
    GamePlayer,
    GameSession,
    UserStats,
)
from chatplay.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class SQLAlchemyGameStore:
    """GameStore backed by the relational database.

    Attributes:
        sessionmaker: Factory for async sessions.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Database operation %s failed: %s", operation, str(e))
                raise PersistenceError(f"Failed to {operation}", e) from e

    async def create_game_session(
        self,
        variant: VariantName,
        llm_model: str | None = None,
    ) -> GameSessionRecord:
        async with self._session("create game session") as session:
            row = GameSession(
                game_type=variant.value,
                status=SessionStatus.WAITING.value,
                game_state_json={},
                llm_model=llm_model,
            )
            session.add(row)
            await session.flush()
            record = self._to_session_record(row)

        logger.info("Created game session %s (%s)", record.id, variant.value)
        return record

    async def get_game_session(self, session_id: str) -> GameSessionRecord | None:
        async with self._session("load game session") as session:
            row = await session.get(GameSession, session_id)
            return self._to_session_record(row) if row else None

    async def update_game_state(
        self,
        session_id: str,
        state: dict[str, Any],
        status: SessionStatus | None = None,
    ) -> None:
        async with self._session("update game state") as session:
            row = await session.get(GameSession, session_id)
            if row is None:
                raise PersistenceError(f"Game session {session_id} does not exist")

            row.game_state_json = state
            if status is not None:
                row.status = status.value
                if status == SessionStatus.ACTIVE and row.started_at is None:
                    row.started_at = utc_now()
                elif status.is_terminal:
                    row.ended_at = utc_now()

    async def record_winner(self, session_id: str, winner_id: str | None) -> None:
        async with self._session("record winner") as session:
            await session.execute(
                update(GameSession)
                .where(GameSession.id == session_id)
                .values(winner_user_id=winner_id)
            )

    async def add_game_player(self, session_id: str, participant: Participant) -> None:
        async with self._session("add game player") as session:
            session.add(
                GamePlayer(
                    session_id=session_id,
                    user_id=participant.participant_id,
                    player_number=participant.slot,
                    display_name=participant.display_name,
                    is_ai=participant.is_ai,
                    left_at=participant.left_at,
                )
            )

    async def get_game_players(self, session_id: str) -> list[Participant]:
        async with self._session("load game players") as session:
            result = await session.execute(
                select(GamePlayer)
                .where(GamePlayer.session_id == session_id)
                .order_by(GamePlayer.player_number)
            )
            return [
                Participant(
                    participant_id=row.user_id,
                    slot=row.player_number,
                    is_ai=row.is_ai,
                    display_name=row.display_name,
                    left_at=ensure_utc(row.left_at),
                )
                for row in result.scalars().all()
            ]

    async def mark_player_left(
        self,
        session_id: str,
        participant_id: str,
        left_at: datetime,
    ) -> None:
        async with self._session("mark player left") as session:
            await session.execute(
                update(GamePlayer)
                .where(
                    GamePlayer.session_id == session_id,
                    GamePlayer.user_id == participant_id,
                )
                .values(left_at=left_at)
            )

    async def record_game_move(
        self,
        session_id: str,
        move_number: int,
        participant_id: str | None,
        move_data: dict[str, Any],
        is_ai: bool = False,
    ) -> MoveRecord:
        async with self._session("record game move") as session:
            row = GameMove(
                session_id=session_id,
                user_id=participant_id,
                move_number=move_number,
                move_data_json=move_data,
                is_ai_move=is_ai,
            )
            session.add(row)
            await session.flush()
            return self._to_move_record(row)

    async def get_game_moves(self, session_id: str) -> list[MoveRecord]:
        async with self._session("load game moves") as session:
            result = await session.execute(
                select(GameMove)
                .where(GameMove.session_id == session_id)
                .order_by(GameMove.move_number)
            )
            return [self._to_move_record(row) for row in result.scalars().all()]

    async def list_active_sessions(self, participant_id: str) -> list[GameSessionRecord]:
        async with self._session("list active sessions") as session:
            result = await session.execute(
                select(GameSession)
                .join(GamePlayer, GamePlayer.session_id == GameSession.id)
                .where(
                    GamePlayer.user_id == participant_id,
                    GamePlayer.left_at.is_(None),
                    GameSession.status == SessionStatus.ACTIVE.value,
                )
                .order_by(GameSession.created_at.desc())
            )
            return [self._to_session_record(row) for row in result.scalars().all()]

    async def record_player_result(
        self,
        participant_id: str,
        variant: VariantName,
        won: bool,
        lost: bool,
    ) -> None:
        async with self._session("record player result") as session:
            result = await session.execute(
                select(UserStats).where(
                    UserStats.user_id == participant_id,
                    UserStats.game_type == variant.value,
                )
            )
            stats = result.scalar_one_or_none()
            if stats is None:
                stats = UserStats(
                    user_id=participant_id,
                    game_type=variant.value,
                    games_played=0,
                    games_won=0,
                    games_lost=0,
                )
                session.add(stats)

            stats.games_played += 1
            stats.games_won += int(won)
            stats.games_lost += int(lost)
            stats.last_played = utc_now()

    def _to_session_record(self, row: GameSession) -> GameSessionRecord:
        return GameSessionRecord(
            id=row.id,
            variant=VariantName(row.game_type),
            status=SessionStatus(row.status),
            state=dict(row.game_state_json or {}),
            llm_model=row.llm_model,
            winner_id=row.winner_user_id,
            created_at=ensure_utc(row.created_at) or utc_now(),
            started_at=ensure_utc(row.started_at),
            ended_at=ensure_utc(row.ended_at),
        )

    def _to_move_record(self, row: GameMove) -> MoveRecord:
        return MoveRecord(
            session_id=row.session_id,
            move_number=row.move_number,
            participant_id=row.user_id,
            is_ai=row.is_ai_move,
            payload=dict(row.move_data_json or {}),
            created_at=ensure_utc(row.created_at) or utc_now(),
        )
