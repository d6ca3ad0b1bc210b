# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Participants for two-player sessions
- A scripted text generator standing in for the LLM
- Engine settings, an in-memory store and a ready-made service
"""

import os
import random
from typing import Any

import pytest

# Use litellm's bundled model cost map instead of fetching it at import time.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

from chatplay.core.config.settings import GameSettings, Settings
from chatplay.domains.gaming.models import Participant
from chatplay.domains.gaming.service import GameSessionService
from chatplay.domains.gaming.store import InMemoryGameStore
from chatplay.domains.gaming.variants import (
    BigEaterGame,
    TicTacToeGame,
    VariantRegistry,
)


class ScriptedGenerator:
    """TextGenerator that replays canned replies.

    Once the script runs out it answers with text no resolver tier
    understands, so the random fallback kicks in.

    Attributes:
        replies: Replies still to be returned, in order.
        error: Exception raised on every call when set.
        prompts: Prompts received so far.
        calls: Keyword arguments received so far.
    """

    def __init__(self, replies: list[str] | None = None) -> None:
        self.replies = list(replies or [])
        self.error: Exception | None = None
        self.prompts: list[str] = []
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        prompt: str,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
        stop_sequences: list[str] | None = None,
    ) -> str:
        self.prompts.append(prompt)
        self.calls.append(
            {
                "max_tokens": max_tokens,
                "temperature": temperature,
                "stop_sequences": stop_sequences,
            }
        )
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return "Hmm, let me think about that..."


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Participant Fixtures
# =============================================================================


@pytest.fixture
def human() -> Participant:
    """Provide the human participant, seated first."""
    return Participant(participant_id="user-1", slot=1, display_name="Alice")


@pytest.fixture
def ai() -> Participant:
    """Provide the AI participant, seated second."""
    return Participant(participant_id="ai:user-1", slot=2, is_ai=True, display_name="Bot")


@pytest.fixture
def participants(human: Participant, ai: Participant) -> list[Participant]:
    """Provide a human-vs-AI seating with the human moving first."""
    return [human, ai]


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def generator() -> ScriptedGenerator:
    """Provide a scripted generator with an empty script."""
    return ScriptedGenerator()


@pytest.fixture
def game_settings() -> GameSettings:
    """Provide engine settings with the instance cache on."""
    return GameSettings(cache_instances=True, max_ai_turns_per_request=6)


@pytest.fixture
def settings(game_settings: GameSettings) -> Settings:
    """Provide application settings for tests."""
    return Settings(environment="development", game=game_settings)


@pytest.fixture
def registry() -> VariantRegistry:
    """Provide a registry with a short Big Eater Competition."""
    registry = VariantRegistry()
    registry.register(TicTacToeGame())
    registry.register(BigEaterGame(max_rounds=2, round_turns=3))
    return registry


@pytest.fixture
def store() -> InMemoryGameStore:
    """Provide an empty in-memory store."""
    return InMemoryGameStore()


@pytest.fixture
def service(
    store: InMemoryGameStore,
    generator: ScriptedGenerator,
    registry: VariantRegistry,
    settings: Settings,
) -> GameSessionService:
    """Provide a session engine wired to the in-memory store."""
    return GameSessionService(
        store=store,
        generator=generator,
        registry=registry,
        settings=settings,
        rng=random.Random(42),
    )
