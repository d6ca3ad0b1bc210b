# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""AI context builder for converting game state into a move prompt.

This module provides the AIContextBuilder class that combines a variant's
view of the state with the recent move log into an AIMoveContext.

Example:
    builder = AIContextBuilder(recent_moves=3)
    context = builder.build(variant, state, participants, moves)
    prompt = context.to_prompt()
"""

import logging
from typing import Any, Sequence

from chatplay.domains.gaming.context import AIMoveContext, RecentMove
from chatplay.domains.gaming.models import MoveRecord, Participant
from chatplay.domains.gaming.variants.base import GameVariant, participant_for_slot

logger = logging.getLogger(__name__)


class AIContextBuilder:
    """Builds AIMoveContext from variant state and the move log.

    Attributes:
        recent_moves: How many log entries to include.
    """

    def __init__(self, recent_moves: int = 3):
        """Initialize the context builder.

        Args:
            recent_moves: How many log entries to include in the prompt.
        """
        self._recent_moves = recent_moves

    def build(
        self,
        variant: GameVariant,
        state: Any,
        participants: Sequence[Participant],
        moves: Sequence[MoveRecord],
    ) -> AIMoveContext:
        """Build the context for the participant whose turn it is.

        Args:
            variant: Variant being played.
            state: Current variant state.
            participants: Session participants.
            moves: Move log, oldest first.

        Returns:
            AIMoveContext ready for prompting.
        """
        view = variant.ai_context(state, participants)
        seat = participant_for_slot(participants, view.player_slot)

        context = AIMoveContext(
            game_name=variant.display_name,
            board=view.board,
            player_slot=view.player_slot,
            player_name=seat.display_name if seat else f"Player {view.player_slot}",
            available_moves=view.available_moves,
            recent_moves=self._recent(moves, participants),
            notes=view.notes,
            instructions=view.instructions,
        )

        logger.debug(
            "Built AI context: game=%s, slot=%d, moves=%d, recent=%d",
            variant.name.value,
            context.player_slot,
            len(context.available_moves),
            len(context.recent_moves),
        )
        return context

    def build_prompt(
        self,
        variant: GameVariant,
        state: Any,
        participants: Sequence[Participant],
        moves: Sequence[MoveRecord],
    ) -> str:
        """Build the context and render it as prompt text."""
        return self.build(variant, state, participants, moves).to_prompt()

    def _recent(
        self,
        moves: Sequence[MoveRecord],
        participants: Sequence[Participant],
    ) -> list[RecentMove]:
        if self._recent_moves <= 0:
            return []

        names = {p.participant_id: p.display_name for p in participants}
        ai_name = next((p.display_name for p in participants if p.is_ai), "AI")

        recent = []
        for move in list(moves)[-self._recent_moves:]:
            if move.is_ai or move.participant_id is None:
                player = ai_name
            else:
                player = names.get(move.participant_id, move.participant_id)
            recent.append(RecentMove(player=player, description=move.description))
        return recent
