# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Game variant registry.

This module provides:
- VariantRegistry: Central registry for game variants
- get_variant_registry: Factory function for the default registry

The session engine dispatches on the variant name stored with each
session, so the registry is the only place that knows concrete classes.

Usage:
    from chatplay.domains.gaming.variants import get_variant_registry

    registry = get_variant_registry()
    grid = registry.get("tic_tac_toe")
"""

import logging
from typing import Iterator

from chatplay.domains.gaming.models import VariantName
from chatplay.domains.gaming.variants.base import GameVariant, VariantInfo

logger = logging.getLogger(__name__)


class UnsupportedVariantError(Exception):
    """Raised when a variant name is unknown or not registered.

    Attributes:
        name: The requested variant name.
        available: Registered variant names.
        message: Human-readable error description.
    """

    def __init__(self, name: str, available: list[VariantName]) -> None:
        self.name = name
        self.available = available
        available_str = ", ".join(v.value for v in available)
        self.message = (
            f"Game '{name}' is not supported. "
            f"Available: {available_str or 'none'}"
        )
        super().__init__(self.message)


class VariantRegistry:
    """Registry of game variant instances keyed by variant name.

    Variants are stateless, so one instance per name serves all sessions.

    Example:
        registry = VariantRegistry()
        registry.register(TicTacToeGame())
        grid = registry.get(VariantName.TIC_TAC_TOE)
    """

    def __init__(self) -> None:
        """Initialize an empty variant registry."""
        self._variants: dict[VariantName, GameVariant] = {}

    def register(self, variant: GameVariant) -> None:
        """Register a variant.

        Raises:
            ValueError: If the variant name is already registered.
        """
        if variant.name in self._variants:
            raise ValueError(
                f"Variant '{variant.name.value}' is already registered. "
                f"Use replace() to override."
            )

        self._variants[variant.name] = variant
        logger.info(
            "Registered game variant: %s (%s)",
            variant.display_name,
            variant.name.value,
        )

    def replace(self, variant: GameVariant) -> None:
        """Register or replace a variant."""
        if variant.name in self._variants:
            logger.info("Replacing game variant: %s", variant.name.value)
        self._variants[variant.name] = variant

    def resolve_name(self, name: str | VariantName) -> VariantName:
        """Map a variant name or display name onto a VariantName.

        Matching is case-insensitive and treats spaces and dashes like
        underscores, so "Tic Tac Toe" and "tic-tac-toe" both work.

        Raises:
            UnsupportedVariantError: If nothing matches.
        """
        if isinstance(name, VariantName):
            return name

        key = name.strip().lower().replace("-", "_").replace(" ", "_")
        for variant_name in VariantName:
            if key == variant_name.value:
                return variant_name
        for variant in self._variants.values():
            if key == variant.display_name.lower().replace(" ", "_"):
                return variant.name

        raise UnsupportedVariantError(name, self.list_names())

    def get(self, name: str | VariantName) -> GameVariant:
        """Get a variant by name.

        Raises:
            UnsupportedVariantError: If the name is unknown or not registered.
        """
        variant_name = self.resolve_name(name)
        if variant_name not in self._variants:
            raise UnsupportedVariantError(variant_name.value, self.list_names())
        return self._variants[variant_name]

    def has(self, name: str | VariantName) -> bool:
        """Check if a variant is registered under a name."""
        try:
            self.get(name)
        except UnsupportedVariantError:
            return False
        return True

    def list_names(self) -> list[VariantName]:
        """List registered variant names."""
        return list(self._variants.keys())

    def get_info(self) -> list[VariantInfo]:
        """Describe every registered variant."""
        return [variant.info() for variant in self._variants.values()]

    def __len__(self) -> int:
        """Get number of registered variants."""
        return len(self._variants)

    def __contains__(self, name: object) -> bool:
        """Check if a variant name is registered."""
        return isinstance(name, (str, VariantName)) and self.has(name)

    def __iter__(self) -> Iterator[VariantName]:
        """Iterate over registered variant names."""
        return iter(self._variants)

    def __repr__(self) -> str:
        """Return string representation."""
        names = ", ".join(v.value for v in self._variants)
        return f"VariantRegistry([{names}])"


# Global default registry instance (lazy-loaded)
_default_registry: VariantRegistry | None = None


def get_variant_registry() -> VariantRegistry:
    """Get or create the global default variant registry.

    Round limits for the Big Eater Competition come from settings.

    Returns:
        The default variant registry.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = _create_default_registry()

    return _default_registry


def _create_default_registry() -> VariantRegistry:
    from chatplay.core.config.settings import get_settings
    from chatplay.domains.gaming.variants.grid import TicTacToeGame
    from chatplay.domains.gaming.variants.resource import BigEaterGame

    settings = get_settings()
    registry = VariantRegistry()
    registry.register(TicTacToeGame())
    registry.register(
        BigEaterGame(
            max_rounds=settings.game.resource_max_rounds,
            round_turns=settings.game.resource_round_turns,
        )
    )

    logger.info(
        "Created default VariantRegistry with %d variants: %s",
        len(registry),
        [name.value for name in registry],
    )
    return registry


def reset_variant_registry() -> None:
    """Reset the global default variant registry.

    Useful for testing or reconfiguration.
    """
    global _default_registry
    _default_registry = None
    logger.info("Variant registry reset")
