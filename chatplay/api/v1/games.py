# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Game session API endpoints.

This module provides endpoints for human-vs-AI chat games:
- GET /variants - List available variants (MUST be before /{session_id})
- GET /sessions - List a participant's active sessions (MUST be before /{session_id})
- POST / - Create a session
- GET /{session_id} - Get the session view
- POST /{session_id}/move - Submit a move
- POST /{session_id}/ai-turn - Let the AI play its pending turn
- POST /{session_id}/forfeit - Give up
- POST /{session_id}/cancel - Abandon without a winner
- GET /{session_id}/history - Move log

IMPORTANT: Static routes (/variants, /sessions) MUST be defined before
parameterized routes (/{session_id}) to prevent route matching issues.

Errors are returned as their human-readable message only.

Example:
    POST /api/v1/games
    {
        "variant": "tic_tac_toe",
        "player_id": "user-1",
        "player_name": "Alice"
    }
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from chatplay.api.dependencies import get_game_service
from chatplay.core.config import get_settings
from chatplay.domains.gaming.models import GameView, MoveResult
from chatplay.domains.gaming.schemas import (
    CancelResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    ForfeitRequest,
    MoveEntry,
    SessionSummary,
    SubmitMoveRequest,
)
from chatplay.domains.gaming.service import GameNotFoundError, GameSessionService
from chatplay.domains.gaming.variants import (
    GameError,
    UnsupportedVariantError,
    VariantInfo,
)
from chatplay.infrastructure.database import PersistenceError
from chatplay.utils.logging import bind_context

logger = logging.getLogger(__name__)

router = APIRouter()

GAME_OVER_DETAIL = "This game is not active anymore"


def _to_http_error(error: Exception) -> HTTPException:
    """Map a domain error to an HTTP error carrying only its message."""
    if isinstance(error, (GameError, UnsupportedVariantError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
    if isinstance(error, GameNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game session not found")
    if isinstance(error, PersistenceError):
        logger.error("Storage failure: %s", error)
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Game storage is unavailable, please try again",
        )
    logger.error("Unexpected error: %s", error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Something went wrong",
    )


async def _require_view(service: GameSessionService, session_id: str) -> GameView:
    view = await service.get_view(session_id)
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Game session not found",
        )
    return view


def _require_available(result: MoveResult) -> MoveResult:
    if not result.available:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=GAME_OVER_DETAIL)
    return result


@router.get(
    "/variants",
    response_model=list[VariantInfo],
    summary="List variants",
    description="List the games that can be played.",
)
async def list_variants(
    service: GameSessionService = Depends(get_game_service),
) -> list[VariantInfo]:
    """List available variants."""
    return service.list_variants()


@router.get(
    "/sessions",
    response_model=list[SessionSummary],
    summary="List active sessions",
    description="List active sessions a participant is seated in.",
)
async def list_sessions(
    participant_id: str,
    service: GameSessionService = Depends(get_game_service),
) -> list[SessionSummary]:
    """List a participant's active sessions."""
    try:
        records = await service.list_active_sessions(participant_id)
    except PersistenceError as e:
        raise _to_http_error(e) from e
    return [SessionSummary.from_record(record) for record in records]


@router.post(
    "",
    response_model=CreateSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a session",
    description="Start a human-vs-AI session. If the AI moves first, its turn is played.",
)
async def create_session(
    data: CreateSessionRequest,
    service: GameSessionService = Depends(get_game_service),
) -> CreateSessionResponse:
    """Create a game session.

    Args:
        data: Session configuration.
        service: Session engine.

    Returns:
        CreateSessionResponse with the session id and its first view.

    Raises:
        HTTPException: If the variant or configuration is invalid.
    """
    bind_context(participant_id=data.player_id)
    logger.info(
        "Creating session: participant=%s, variant=%s, ai_first=%s",
        data.player_id,
        data.variant,
        data.ai_first,
    )

    participants = data.to_participants(get_settings().game.ai_participant_prefix)
    try:
        session_id = await service.create_session(
            data.variant,
            participants,
            llm_model=data.llm_model,
        )
        view = await _require_view(service, session_id)
        ai_error = None
        if view.awaiting_ai:
            result = await service.play_ai_turn(session_id)
            view = result.view or view
            ai_error = result.ai_error
    except (GameError, UnsupportedVariantError, PersistenceError) as e:
        raise _to_http_error(e) from e

    return CreateSessionResponse(session_id=session_id, view=view, ai_error=ai_error)


# =============================================================================
# PARAMETERIZED ROUTES (must be defined after static routes)
# =============================================================================


@router.get(
    "/{session_id}",
    response_model=GameView,
    summary="Get session view",
    description="Get the board, status and legal moves of a session.",
)
async def get_session(
    session_id: str,
    service: GameSessionService = Depends(get_game_service),
) -> GameView:
    """Get a session view."""
    try:
        return await _require_view(service, session_id)
    except PersistenceError as e:
        raise _to_http_error(e) from e


@router.post(
    "/{session_id}/move",
    response_model=MoveResult,
    summary="Submit a move",
    description="Submit a move. The AI answer, if due, is included in the result.",
)
async def submit_move(
    session_id: str,
    data: SubmitMoveRequest,
    service: GameSessionService = Depends(get_game_service),
) -> MoveResult:
    """Submit a move.

    Raises:
        HTTPException: 400 for rejected moves, 409 if the game is over.
    """
    bind_context(session_id=session_id, participant_id=data.participant_id)

    try:
        result = await service.submit_move(session_id, data.participant_id, data.move)
    except (GameError, PersistenceError) as e:
        raise _to_http_error(e) from e
    return _require_available(result)


@router.post(
    "/{session_id}/ai-turn",
    response_model=MoveResult,
    summary="Play the AI turn",
    description="Let the AI play when it holds the turn, e.g. after a failed AI reply.",
)
async def play_ai_turn(
    session_id: str,
    service: GameSessionService = Depends(get_game_service),
) -> MoveResult:
    """Play the pending AI turn."""
    bind_context(session_id=session_id)

    try:
        result = await service.play_ai_turn(session_id)
    except (GameError, PersistenceError) as e:
        raise _to_http_error(e) from e
    return _require_available(result)


@router.post(
    "/{session_id}/forfeit",
    response_model=GameView,
    summary="Forfeit",
    description="Give up the session. The opponent wins.",
)
async def forfeit_session(
    session_id: str,
    data: ForfeitRequest,
    service: GameSessionService = Depends(get_game_service),
) -> GameView:
    """Forfeit a session."""
    bind_context(session_id=session_id, participant_id=data.participant_id)

    try:
        view = await service.forfeit_session(session_id, data.participant_id)
    except (GameError, PersistenceError) as e:
        raise _to_http_error(e) from e

    if view is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=GAME_OVER_DETAIL)
    return view


@router.post(
    "/{session_id}/cancel",
    response_model=CancelResponse,
    summary="Cancel",
    description="Abandon the session without a winner.",
)
async def cancel_session(
    session_id: str,
    service: GameSessionService = Depends(get_game_service),
) -> CancelResponse:
    """Cancel a session."""
    try:
        cancelled = await service.cancel_session(session_id)
    except PersistenceError as e:
        raise _to_http_error(e) from e
    return CancelResponse(session_id=session_id, cancelled=cancelled)


@router.get(
    "/{session_id}/history",
    response_model=list[MoveEntry],
    summary="Move history",
    description="Get the move log of a session, oldest first.",
)
async def get_history(
    session_id: str,
    service: GameSessionService = Depends(get_game_service),
) -> list[MoveEntry]:
    """Get the move log."""
    try:
        moves = await service.get_history(session_id)
    except (GameNotFoundError, PersistenceError) as e:
        raise _to_http_error(e) from e
    return [MoveEntry.from_record(move) for move in moves]
