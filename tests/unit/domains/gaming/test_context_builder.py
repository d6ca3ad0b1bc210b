# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for AIContextBuilder and AIMoveContext."""

import random

import pytest

from chatplay.domains.gaming.context import AIMoveContext, RecentMove
from chatplay.domains.gaming.context_builder import AIContextBuilder
from chatplay.domains.gaming.models import MoveRecord, Participant
from chatplay.domains.gaming.variants import BigEaterGame, TicTacToeGame


def record(number: int, participant_id: str | None, description: str, is_ai: bool = False) -> MoveRecord:
    """Build a move log entry."""
    return MoveRecord(
        session_id="session-1",
        move_number=number,
        participant_id=participant_id,
        is_ai=is_ai,
        payload={"token": str(number), "description": description},
    )


@pytest.mark.unit
class TestAIMoveContext:
    """Tests for prompt rendering."""

    def test_prompt_layout(self) -> None:
        """Test the sections of a full prompt."""
        context = AIMoveContext(
            game_name="Tic Tac Toe",
            board="X | 2 | 3",
            player_slot=2,
            player_name="Bot",
            available_moves=["2", "3"],
            recent_moves=[RecentMove(player="Alice", description="Placed X at position 1")],
            notes=["You play O."],
            instructions="Answer with a cell number.",
        )

        prompt = context.to_prompt()

        assert prompt.startswith(
            "You are playing Tic Tac Toe. Here's the current game state:\n\nBoard:\nX | 2 | 3\n\n"
        )
        assert "You play O.\n\n" in prompt
        assert "Recent moves:\n- Alice: Placed X at position 1\n" in prompt
        assert "It's your turn (Player 2). Available moves: 2, 3" in prompt
        assert "Answer with a cell number." in prompt
        assert 'Start with a line "Move: <your move>".' in prompt
        assert prompt.endswith("Choose your move and explain your strategy briefly:")

    def test_prompt_without_history(self) -> None:
        """Test that empty sections are left out."""
        context = AIMoveContext(
            game_name="Tic Tac Toe",
            board="1 | 2 | 3",
            player_slot=1,
            player_name="Bot",
        )

        prompt = context.to_prompt()

        assert "Recent moves" not in prompt
        assert "Available moves" not in prompt
        assert "It's your turn (Player 1)." in prompt


@pytest.mark.unit
class TestAIContextBuilder:
    """Tests for building context from variant state and the move log."""

    def test_grid_context(self, participants: list[Participant]) -> None:
        """Test context for the AI's first Tic Tac Toe move."""
        game = TicTacToeGame()
        state = game.apply_move(game.initialize(participants), participants[0], {"position": 5}).state
        moves = [record(1, "user-1", "Placed X at position 5")]

        context = AIContextBuilder().build(game, state, participants, moves)

        assert context.game_name == "Tic Tac Toe"
        assert context.player_slot == 2
        assert context.player_name == "Bot"
        assert context.available_moves == ["1", "2", "3", "4", "6", "7", "8", "9"]
        assert context.recent_moves == [
            RecentMove(player="Alice", description="Placed X at position 5")
        ]

    def test_only_last_moves_are_kept(self, participants: list[Participant]) -> None:
        """Test that the log is cut to the configured window."""
        game = TicTacToeGame()
        state = game.initialize(participants)
        moves = [
            record(1, "user-1", "first"),
            record(2, None, "second", is_ai=True),
            record(3, "user-1", "third"),
            record(4, None, "fourth", is_ai=True),
        ]

        context = AIContextBuilder(recent_moves=2).build(game, state, participants, moves)

        assert [m.description for m in context.recent_moves] == ["third", "fourth"]
        assert [m.player for m in context.recent_moves] == ["Alice", "Bot"]

    def test_recent_moves_can_be_disabled(self, participants: list[Participant]) -> None:
        """Test that a zero window drops the log."""
        game = TicTacToeGame()
        moves = [record(1, "user-1", "first")]

        context = AIContextBuilder(recent_moves=0).build(
            game, game.initialize(participants), participants, moves
        )

        assert context.recent_moves == []

    def test_unknown_mover_keeps_their_id(self, participants: list[Participant]) -> None:
        """Test that a log entry from a stranger falls back to the raw id."""
        game = TicTacToeGame()
        moves = [record(1, "guest-9", "first")]

        context = AIContextBuilder().build(game, game.initialize(participants), participants, moves)

        assert context.recent_moves[0].player == "guest-9"

    def test_resource_prompt_lists_tokens(self, participants: list[Participant]) -> None:
        """Test the Big Eater prompt during the AI's preparation turn."""
        game = BigEaterGame(max_rounds=2, round_turns=3)
        state = game.initialize(participants, rng=random.Random(4))
        state = game.apply_move(state, participants[0], {"action": "ready"}).state

        prompt = AIContextBuilder().build_prompt(game, state, participants, [])

        assert prompt.startswith("You are playing Big Eater Competition.")
        assert "Round 1/2, phase: preparation." in prompt
        assert "It's your turn (Player 2). Available moves: ready" in prompt
        assert "You (Bot):" in prompt
        assert "Partner (Alice):" in prompt
