# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the variant registry."""

from unittest.mock import patch

import pytest

from chatplay.core.config.settings import GameSettings, Settings
from chatplay.domains.gaming.models import VariantName
from chatplay.domains.gaming.variants import (
    BigEaterGame,
    TicTacToeGame,
    UnsupportedVariantError,
    VariantRegistry,
    get_variant_registry,
    reset_variant_registry,
)


@pytest.mark.unit
class TestVariantRegistry:
    """Tests for registration and lookup."""

    def test_get_by_enum_and_value(self, registry: VariantRegistry) -> None:
        """Test lookup by VariantName and by its string value."""
        assert registry.get(VariantName.TIC_TAC_TOE).name == VariantName.TIC_TAC_TOE
        assert registry.get("big_eater").name == VariantName.BIG_EATER

    @pytest.mark.parametrize("name", ["Tic Tac Toe", "tic-tac-toe", " TIC_TAC_TOE "])
    def test_lenient_names(self, registry: VariantRegistry, name: str) -> None:
        """Test display names and dashes resolve to the variant."""
        assert registry.resolve_name(name) == VariantName.TIC_TAC_TOE

    def test_display_name_of_resource_game(self, registry: VariantRegistry) -> None:
        """Test that the Big Eater display name resolves."""
        assert registry.get("Big Eater Competition").name == VariantName.BIG_EATER

    def test_unknown_name(self, registry: VariantRegistry) -> None:
        """Test that an unknown game lists the available ones."""
        with pytest.raises(UnsupportedVariantError) as exc_info:
            registry.get("chess")

        assert exc_info.value.name == "chess"
        assert "tic_tac_toe" in exc_info.value.message
        assert "big_eater" in exc_info.value.message

    def test_known_but_unregistered(self) -> None:
        """Test that a valid name without a registered variant is unsupported."""
        registry = VariantRegistry()
        registry.register(TicTacToeGame())

        with pytest.raises(UnsupportedVariantError, match="Available: tic_tac_toe"):
            registry.get(VariantName.BIG_EATER)
        assert registry.has("tic_tac_toe")
        assert not registry.has("big_eater")

    def test_duplicate_registration(self, registry: VariantRegistry) -> None:
        """Test that a name can only be registered once."""
        with pytest.raises(ValueError, match="already registered"):
            registry.register(TicTacToeGame())

    def test_replace(self, registry: VariantRegistry) -> None:
        """Test that replace() swaps the registered instance."""
        longer = BigEaterGame(max_rounds=7)

        registry.replace(longer)

        assert registry.get(VariantName.BIG_EATER) is longer
        assert len(registry) == 2

    def test_container_protocol(self, registry: VariantRegistry) -> None:
        """Test membership and iteration."""
        assert "tic_tac_toe" in registry
        assert "chess" not in registry
        assert 42 not in registry
        assert list(registry) == [VariantName.TIC_TAC_TOE, VariantName.BIG_EATER]

    def test_info(self, registry: VariantRegistry) -> None:
        """Test the variant descriptions."""
        infos = registry.get_info()

        assert [info.display_name for info in infos] == ["Tic Tac Toe", "Big Eater Competition"]
        assert all(info.min_players == 2 and info.max_players == 2 for info in infos)
        assert infos[1].commands


@pytest.mark.unit
class TestDefaultRegistry:
    """Tests for the lazily created default registry."""

    def setup_method(self) -> None:
        reset_variant_registry()

    def teardown_method(self) -> None:
        reset_variant_registry()

    def test_uses_round_settings(self) -> None:
        """Test that Big Eater round limits come from settings."""
        settings = Settings(game=GameSettings(resource_max_rounds=4, resource_round_turns=9))

        with patch("chatplay.core.config.settings.get_settings", return_value=settings):
            registry = get_variant_registry()

        game = registry.get(VariantName.BIG_EATER)
        assert game._max_rounds == 4
        assert game._round_turns == 9
        assert len(registry) == 2

    def test_is_cached_until_reset(self) -> None:
        """Test that the default registry is created once."""
        first = get_variant_registry()

        assert get_variant_registry() is first
        reset_variant_registry()
        assert get_variant_registry() is not first
