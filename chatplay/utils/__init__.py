# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for chatplay.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
"""

from chatplay.utils.datetime import (
    ensure_utc,
    seconds_between,
    utc_now,
)
from chatplay.utils.logging import (
    bind_context,
    clear_context,
    setup_logging,
)

__all__ = [
    # DateTime
    "utc_now",
    "ensure_utc",
    "seconds_between",
    # Logging
    "setup_logging",
    "bind_context",
    "clear_context",
]
