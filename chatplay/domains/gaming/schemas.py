# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API schemas for gaming domain.

This module defines Pydantic models for API request/response:
- CreateSessionRequest/Response: Start a new human-vs-AI session
- SubmitMoveRequest: Submit a move
- ForfeitRequest: Give up a session
- SessionSummary / MoveEntry: Listings and history

GameView and MoveResult from the domain models are returned as-is.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from chatplay.domains.gaming.models import (
    GameSessionRecord,
    GameView,
    MoveRecord,
    Participant,
    SessionStatus,
    VariantName,
)


# =============================================================================
# Request Models
# =============================================================================


class CreateSessionRequest(BaseModel):
    """Request to start a human-vs-AI session."""

    variant: str = Field(
        description="Variant name or display name (e.g. 'tic_tac_toe', 'Big Eater Competition')",
    )
    player_id: str = Field(min_length=1, description="Human participant id")
    player_name: str = Field(min_length=1, max_length=100, description="Human display name")
    ai_name: str = Field(default="AI", min_length=1, max_length=100, description="AI display name")
    ai_first: bool = Field(default=False, description="Seat the AI in slot 1")
    llm_model: str | None = Field(
        default=None,
        description="LiteLLM model for the AI (server default if omitted)",
    )

    def to_participants(self, ai_prefix: str = "ai") -> list[Participant]:
        """Seat the human and the AI."""
        human_slot, ai_slot = (2, 1) if self.ai_first else (1, 2)
        return [
            Participant(
                participant_id=self.player_id,
                slot=human_slot,
                display_name=self.player_name,
            ),
            Participant(
                participant_id=f"{ai_prefix}:{self.player_id}",
                slot=ai_slot,
                is_ai=True,
                display_name=self.ai_name,
            ),
        ]


class SubmitMoveRequest(BaseModel):
    """Request to submit a move."""

    participant_id: str = Field(min_length=1, description="Participant making the move")
    move: str | int = Field(description="Raw move, e.g. '5' or 'powerup energy_drink'")


class ForfeitRequest(BaseModel):
    """Request to give up a session."""

    participant_id: str = Field(min_length=1, description="Participant giving up")


# =============================================================================
# Response Models
# =============================================================================


class CreateSessionResponse(BaseModel):
    """Response after creating a session."""

    session_id: str = Field(description="Game session ID")
    view: GameView = Field(description="Session snapshot, after any opening AI turn")
    ai_error: str | None = Field(
        default=None,
        description="Why the opening AI turn failed, if it did",
    )


class SessionSummary(BaseModel):
    """Short description of a session for listings."""

    session_id: str
    variant: VariantName
    status: SessionStatus
    created_at: datetime
    started_at: datetime | None = None

    @classmethod
    def from_record(cls, record: GameSessionRecord) -> "SessionSummary":
        return cls(
            session_id=record.id,
            variant=record.variant,
            status=record.status,
            created_at=record.created_at,
            started_at=record.started_at,
        )


class MoveEntry(BaseModel):
    """One entry of a session's move history."""

    move_number: int
    participant_id: str | None = None
    is_ai: bool = False
    token: str | None = None
    description: str
    source: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def from_record(cls, record: MoveRecord) -> "MoveEntry":
        return cls(
            move_number=record.move_number,
            participant_id=record.participant_id,
            is_ai=record.is_ai,
            token=record.token,
            description=record.description,
            source=record.payload.get("source"),
            data=record.payload,
            created_at=record.created_at,
        )


class CancelResponse(BaseModel):
    """Result of a cancel request."""

    session_id: str
    cancelled: bool
