# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for chatplay.

This package provides:
- connection: Async engine and session management
- models: ORM models for sessions, players, moves and stats
- game_store: SQLAlchemy implementation of the game store
"""

from chatplay.infrastructure.database.connection import (
    PersistenceError,
    check_database_connection,
    close_database,
    create_tables,
    get_engine,
    get_sessionmaker,
    init_database,
)

__all__ = [
    "PersistenceError",
    "init_database",
    "close_database",
    "create_tables",
    "get_engine",
    "get_sessionmaker",
    "check_database_connection",
]
