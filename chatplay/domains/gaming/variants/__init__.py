# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Game variants for the gaming domain.

Available variants:
- TicTacToeGame: 3x3 grid game
- BigEaterGame: Round-based eating competition

Usage:
    from chatplay.domains.gaming.variants import get_variant_registry

    registry = get_variant_registry()
    variant = registry.get("big_eater")
    state = variant.initialize(participants)
"""

from chatplay.domains.gaming.variants.base import (
    ForfeitOutcome,
    GameError,
    GameVariant,
    IllegalMoveError,
    MalformedInputError,
    MoveOutcome,
    SetupError,
    VariantContext,
    VariantInfo,
    participant_for_slot,
)
from chatplay.domains.gaming.variants.grid import GridState, TicTacToeGame
from chatplay.domains.gaming.variants.registry import (
    UnsupportedVariantError,
    VariantRegistry,
    get_variant_registry,
    reset_variant_registry,
)
from chatplay.domains.gaming.variants.resource import BigEaterGame, ResourceState

__all__ = [
    # Interface
    "GameVariant",
    "MoveOutcome",
    "ForfeitOutcome",
    "VariantContext",
    "VariantInfo",
    "participant_for_slot",
    # Errors
    "GameError",
    "SetupError",
    "IllegalMoveError",
    "MalformedInputError",
    "UnsupportedVariantError",
    # Variants
    "TicTacToeGame",
    "GridState",
    "BigEaterGame",
    "ResourceState",
    # Registry
    "VariantRegistry",
    "get_variant_registry",
    "reset_variant_registry",
]
