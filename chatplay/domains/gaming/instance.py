# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Reconstructed game instance.

A GameInstance bundles everything the engine needs to play a session:
the stored record, the variant, the decoded state, the participants and
the move log. It is rebuilt from storage on demand and may be cached,
but storage stays authoritative.
"""

from dataclasses import dataclass, field
from typing import Any

from chatplay.domains.gaming.models import GameSessionRecord, MoveRecord, Participant
from chatplay.domains.gaming.variants.base import GameVariant, participant_for_slot
from chatplay.utils.datetime import seconds_between


@dataclass
class GameInstance:
    """A playable session.

    Attributes:
        session: Stored session record.
        variant: Variant implementation.
        state: Decoded variant state.
        participants: Seats ordered by slot.
        moves: Move log, oldest first.
    """

    session: GameSessionRecord
    variant: GameVariant
    state: Any
    participants: list[Participant] = field(default_factory=list)
    moves: list[MoveRecord] = field(default_factory=list)

    @property
    def session_id(self) -> str:
        """Get the session identifier."""
        return self.session.id

    @property
    def move_count(self) -> int:
        """Number of moves in the log."""
        return len(self.moves)

    @property
    def next_move_number(self) -> int:
        """Sequence number for the next log entry."""
        return max((m.move_number for m in self.moves), default=0) + 1

    @property
    def duration_seconds(self) -> int | None:
        """Seconds since the session started, or its total length once ended."""
        return seconds_between(self.session.started_at, self.session.ended_at)

    @property
    def current_participant(self) -> Participant | None:
        """Participant whose turn it is, None once the game has ended."""
        return participant_for_slot(self.participants, self.variant.current_slot(self.state))

    def participant(self, participant_id: str) -> Participant | None:
        """Find a participant by id."""
        return next(
            (p for p in self.participants if p.participant_id == participant_id),
            None,
        )
