# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for chatplay.

Example:
    >>> from chatplay.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from chatplay.core.config.settings import (
    APISettings,
    DatabaseSettings,
    GameSettings,
    LLMSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "LLMSettings",
    "GameSettings",
    "APISettings",
]
