# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependencies for the chatplay API."""

from fastapi import HTTPException, Request, status

from chatplay.domains.gaming.service import GameSessionService


def get_game_service(request: Request) -> GameSessionService:
    """Get the session engine created at startup.

    Raises:
        HTTPException: 503 if the application has not finished starting.
    """
    service = getattr(request.app.state, "game_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Game service is not available",
        )
    return service
