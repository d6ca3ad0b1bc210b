# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Data models for the gaming domain.

This module defines Pydantic models and enums for:
- Variant names, session status and end reasons
- Sessions, participants and the move log
- End detection and rendering results
- Turn reports returned to the presentation layer

Variant-specific state models live beside their variant
(GridState, ResourceState) and are stored as plain JSON dicts.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from chatplay.utils.datetime import utc_now


class VariantName(str, Enum):
    """Supported game variants."""

    TIC_TAC_TOE = "tic_tac_toe"
    BIG_EATER = "big_eater"


class SessionStatus(str, Enum):
    """Session lifecycle status.

    Transitions: waiting -> active -> completed | cancelled.
    Sessions are never physically deleted.
    """

    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Check whether no further moves are accepted."""
        return self in (SessionStatus.COMPLETED, SessionStatus.CANCELLED)


class EndReason(str, Enum):
    """Why a game ended."""

    WIN = "win"
    DRAW = "draw"
    EXHAUSTED_ROUNDS = "exhausted-rounds"
    FORFEIT = "forfeit"


class MoveSource(str, Enum):
    """How a move was obtained.

    Human moves are parsed from player input. AI moves record which
    resolver tier produced them.
    """

    HUMAN = "human"
    AI_EXACT = "ai_exact"
    AI_HEURISTIC = "ai_heuristic"
    AI_RANDOM = "ai_random"
    FORFEIT = "forfeit"


class Participant(BaseModel):
    """A seat in a game session.

    Attributes:
        participant_id: Human identity, or a synthetic id for the AI.
        slot: Seat number, 1-based. Slot 1 moves first.
        is_ai: Whether the seat is played by the language model.
        display_name: Name shown in boards and prompts.
        left_at: When the participant forfeited, if they did.
    """

    participant_id: str = Field(min_length=1, description="Participant identity")
    slot: int = Field(ge=1, description="Seat number, 1-based")
    is_ai: bool = Field(default=False, description="Played by the AI")
    display_name: str = Field(min_length=1, description="Name shown to players")
    left_at: datetime | None = Field(
        default=None,
        description="When the participant left the session",
    )

    @property
    def has_left(self) -> bool:
        """Check whether the participant has left the session."""
        return self.left_at is not None


class GameSessionRecord(BaseModel):
    """A persisted game session.

    Attributes:
        id: Session identifier.
        variant: Variant being played.
        status: Lifecycle status.
        state: Serialized variant state.
        llm_model: Model used for the AI participant.
        winner_id: Participant id of the winner, if any.
        created_at: When the session was created.
        started_at: When the session became active.
        ended_at: When the session completed or was cancelled.
    """

    id: str = Field(description="Session identifier")
    variant: VariantName = Field(description="Variant being played")
    status: SessionStatus = Field(default=SessionStatus.WAITING)
    state: dict[str, Any] = Field(
        default_factory=dict,
        description="Serialized variant state",
    )
    llm_model: str | None = Field(default=None, description="AI model identifier")
    winner_id: str | None = Field(default=None, description="Winning participant id")
    created_at: datetime = Field(default_factory=utc_now)
    started_at: datetime | None = None
    ended_at: datetime | None = None


class MoveRecord(BaseModel):
    """An entry of the append-only move log.

    Attributes:
        session_id: Owning session.
        move_number: Sequence number, monotonic per session, starting at 1.
        participant_id: Acting participant, None for AI moves.
        is_ai: Whether the AI made the move.
        payload: Structured move data (token, payload, description, source).
        created_at: When the move was recorded.
    """

    session_id: str
    move_number: int = Field(ge=1)
    participant_id: str | None = None
    is_ai: bool = False
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def token(self) -> str | None:
        """Get the legal-move token the entry was recorded with."""
        return self.payload.get("token")

    @property
    def description(self) -> str:
        """Get the human-readable description of the move."""
        return self.payload.get("description") or str(self.payload.get("token", ""))


class EndCheck(BaseModel):
    """Result of end-of-game detection.

    Attributes:
        ended: Whether the game is over.
        winner_slot: Winning slot, None for draws and ties.
        reason: Why the game ended.
        winning_line: Cell indices of the winning line (grid games only).
    """

    ended: bool = False
    winner_slot: int | None = None
    reason: EndReason | None = None
    winning_line: list[int] | None = None


class RenderedState(BaseModel):
    """Plain-text rendering of a game state."""

    board: str
    status: str


class GameOutcome(BaseModel):
    """Final outcome handed to end_session()."""

    reason: EndReason
    winner_slot: int | None = None
    winner_id: str | None = None


class TurnSummary(BaseModel):
    """One applied move, as reported back to the caller.

    Attributes:
        move_number: Sequence number in the move log.
        participant_id: Who moved.
        is_ai: Whether the AI moved.
        token: Legal-move token that was applied.
        description: What happened, in plain words.
        source: How the move was obtained.
        ai_reply: Raw model reply for AI moves.
        events: Narrative events produced by the move.
    """

    move_number: int
    participant_id: str
    is_ai: bool = False
    token: str
    description: str
    source: MoveSource
    ai_reply: str | None = None
    events: list[str] = Field(default_factory=list)


class GameView(BaseModel):
    """Presentation-ready snapshot of a session.

    Attributes:
        session_id: Session identifier.
        variant: Variant being played.
        status: Lifecycle status.
        board: Plain-text board.
        status_text: One-line status (whose turn, winner).
        legal_moves: Tokens the current participant may play.
        current_participant_id: Whose turn it is, None once ended.
        awaiting_ai: Whether the AI is to move next.
        ended: Whether the game is over.
        winner: Winning participant, None for draws, ties and open games.
        end_reason: Why the game ended.
        move_count: Moves in the log.
    """

    session_id: str
    variant: VariantName
    status: SessionStatus
    board: str
    status_text: str
    legal_moves: list[str] = Field(default_factory=list)
    current_participant_id: str | None = None
    awaiting_ai: bool = False
    ended: bool = False
    winner: Participant | None = None
    end_reason: EndReason | None = None
    move_count: int = 0


class MoveResult(BaseModel):
    """Cumulative result of a submitted move and any chained AI turn.

    Attributes:
        available: False when the session is missing or already over.
        turns: Moves applied during this call, in order.
        view: Session snapshot after the moves.
        ai_error: Why the chained AI turn failed, if it did.
    """

    available: bool = True
    turns: list[TurnSummary] = Field(default_factory=list)
    view: GameView | None = None
    ai_error: str | None = None

    @property
    def ended(self) -> bool:
        """Check whether the game ended during or before this call."""
        return self.view is not None and self.view.ended
