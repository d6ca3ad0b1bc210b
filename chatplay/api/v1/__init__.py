# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    games: Game session endpoints (create, move, AI turn, forfeit, history).
"""

from fastapi import APIRouter

from chatplay.api.v1 import games


def create_v1_router(prefix: str = "/api/v1") -> APIRouter:
    """Create the v1 router with all domain routers included."""
    router = APIRouter(prefix=prefix)
    router.include_router(games.router, prefix="/games", tags=["Games"])
    return router


__all__ = ["create_v1_router"]
