# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Capability interface shared by all game variants.

This module defines the GameVariant protocol that every variant implements.
Variants are independent, stateless classes: all state is passed in and
returned as pydantic models, so one instance serves every session. There is
no shared mutable base class; the registry dispatches by variant name.

The interface provides a consistent API for:
- Initialization from a participant list
- Move application and end detection (both pure)
- Plain-text rendering and legal-move listing
- Context extraction for AI prompts
- Forfeit handling
- JSON round-tripping of state

Shared helpers for turn ownership and participant lookup live here too.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, Sequence, TypeVar, runtime_checkable

from pydantic import BaseModel, Field

from chatplay.domains.gaming.models import (
    EndCheck,
    Participant,
    RenderedState,
    VariantName,
)

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=BaseModel)


class GameError(Exception):
    """Base exception for variant errors.

    Attributes:
        message: Human-readable error description.
        variant: Variant that raised the error.
        details: Additional error details.
    """

    def __init__(
        self,
        message: str,
        variant: VariantName | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.variant = variant
        self.details = details or {}
        super().__init__(self.message)


class SetupError(GameError):
    """Raised when the participant configuration is invalid."""

    pass


class IllegalMoveError(GameError):
    """Raised when a move is not allowed. State is left unchanged."""

    pass


class MalformedInputError(GameError):
    """Raised when raw input cannot be decoded into a move."""

    pass


@dataclass
class MoveOutcome(Generic[StateT]):
    """Result of applying a move.

    Attributes:
        state: New state. The input state is never mutated.
        description: What happened, in plain words.
        events: Narrative events produced by the move.
    """

    state: StateT
    description: str
    events: list[str] = field(default_factory=list)


@dataclass
class ForfeitOutcome(Generic[StateT]):
    """Result of a participant forfeiting.

    Attributes:
        state: Terminal state.
        winner_slot: Remaining participant's slot, None if nobody remains.
    """

    state: StateT
    winner_slot: int | None


class VariantContext(BaseModel):
    """Variant-specific facts for the AI prompt.

    Attributes:
        board: Board rendering as the AI should see it.
        player_slot: Slot the AI plays.
        available_moves: Legal tokens for the AI.
        notes: Extra situation lines (gauges, phase, food).
        instructions: Variant-specific guidance on the answer format.
    """

    board: str
    player_slot: int
    available_moves: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)
    instructions: str | None = None


class VariantInfo(BaseModel):
    """Static description of a variant, for listings and help screens."""

    name: VariantName
    display_name: str
    description: str
    min_players: int
    max_players: int
    estimated_duration: str
    rules: list[str] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)


@runtime_checkable
class GameVariant(Protocol[StateT]):
    """Capabilities every game variant provides.

    Attributes:
        name: Variant name used for dispatch and persistence.
        display_name: Human-readable name.
        min_players: Minimum participant count.
        max_players: Maximum participant count.
    """

    name: VariantName
    display_name: str
    min_players: int
    max_players: int

    def info(self) -> VariantInfo: ...

    def initialize(
        self,
        participants: Sequence[Participant],
        rng: random.Random | None = None,
    ) -> StateT: ...

    def load_state(self, data: dict[str, Any]) -> StateT: ...

    def dump_state(self, state: StateT) -> dict[str, Any]: ...

    def current_slot(self, state: StateT) -> int | None: ...

    def apply_move(
        self,
        state: StateT,
        participant: Participant,
        payload: dict[str, Any],
        rng: random.Random | None = None,
    ) -> MoveOutcome[StateT]: ...

    def check_end(self, state: StateT) -> EndCheck: ...

    def render(
        self,
        state: StateT,
        participants: Sequence[Participant],
    ) -> RenderedState: ...

    def legal_moves(self, state: StateT, participant: Participant) -> list[str]: ...

    def ai_context(
        self,
        state: StateT,
        participants: Sequence[Participant],
    ) -> VariantContext: ...

    def forfeit(
        self,
        state: StateT,
        participant: Participant,
        participants: Sequence[Participant],
    ) -> ForfeitOutcome[StateT]: ...


def validate_participants(
    participants: Sequence[Participant],
    variant: VariantName,
    min_players: int,
    max_players: int,
) -> list[Participant]:
    """Check a participant list and return it ordered by slot.

    Args:
        participants: Participants to validate.
        variant: Variant being set up, for error reporting.
        min_players: Minimum participant count.
        max_players: Maximum participant count.

    Returns:
        Participants sorted by slot.

    Raises:
        SetupError: If the count is out of range, slots are not 1..n,
            or a participant id appears twice.
    """
    count = len(participants)
    if count < min_players or count > max_players:
        expected = (
            str(min_players)
            if min_players == max_players
            else f"{min_players}-{max_players}"
        )
        raise SetupError(
            f"This game needs {expected} players, got {count}",
            variant=variant,
            details={"count": count},
        )

    ordered = sorted(participants, key=lambda p: p.slot)
    slots = [p.slot for p in ordered]
    if slots != list(range(1, count + 1)):
        raise SetupError(
            f"Player slots must be numbered 1 to {count}, got {slots}",
            variant=variant,
            details={"slots": slots},
        )

    ids = [p.participant_id for p in ordered]
    if len(set(ids)) != len(ids):
        raise SetupError(
            "A participant cannot take more than one seat",
            variant=variant,
        )

    return ordered


def participant_for_slot(
    participants: Sequence[Participant],
    slot: int | None,
) -> Participant | None:
    """Find the participant seated in a slot."""
    if slot is None:
        return None
    for participant in participants:
        if participant.slot == slot:
            return participant
    return None


def ensure_turn(
    current_slot: int | None,
    participant: Participant,
    variant: VariantName,
) -> None:
    """Check that it is the participant's turn.

    Raises:
        IllegalMoveError: If the game is over or another slot is to move.
    """
    if current_slot is None:
        raise IllegalMoveError("The game is already over", variant=variant)
    if participant.slot != current_slot:
        raise IllegalMoveError(
            "It's not your turn",
            variant=variant,
            details={"current_slot": current_slot, "slot": participant.slot},
        )


def remaining_winner_slot(
    participant: Participant,
    participants: Sequence[Participant],
) -> int | None:
    """Pick the winner when a participant forfeits.

    The single participant still seated wins. If nobody else remains,
    or several do, there is no winner.
    """
    remaining = [
        p
        for p in participants
        if p.participant_id != participant.participant_id and not p.has_left
    ]
    if len(remaining) == 1:
        return remaining[0].slot
    return None


def display_name_for_slot(participants: Sequence[Participant], slot: int) -> str:
    """Get a participant's display name, falling back to "Player N"."""
    participant = participant_for_slot(participants, slot)
    return participant.display_name if participant else f"Player {slot}"
