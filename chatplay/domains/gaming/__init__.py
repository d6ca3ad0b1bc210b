# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Gaming domain.

Human-vs-AI chat games run as persisted sessions:
- variants: Rules for each game (Tic Tac Toe, Big Eater Competition)
- resolver: Turns human input and model replies into legal moves
- context_builder: Builds AI prompts from state and move history
- store: Persistence interface and an in-memory implementation
- service: GameSessionService, the session engine
"""

from chatplay.domains.gaming.models import (
    EndReason,
    GameOutcome,
    GameView,
    MoveRecord,
    MoveResult,
    MoveSource,
    Participant,
    SessionStatus,
    TurnSummary,
    VariantName,
)
from chatplay.domains.gaming.service import (
    GameNotFoundError,
    GameServiceError,
    GameSessionService,
)
from chatplay.domains.gaming.store import GameStore, InMemoryGameStore

__all__ = [
    "EndReason",
    "GameOutcome",
    "GameView",
    "MoveRecord",
    "MoveResult",
    "MoveSource",
    "Participant",
    "SessionStatus",
    "TurnSummary",
    "VariantName",
    "GameNotFoundError",
    "GameServiceError",
    "GameSessionService",
    "GameStore",
    "InMemoryGameStore",
]
