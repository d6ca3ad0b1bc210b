# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the Tic Tac Toe variant."""

import pytest

from chatplay.domains.gaming.models import EndReason, Participant
from chatplay.domains.gaming.variants import (
    GridState,
    IllegalMoveError,
    SetupError,
    TicTacToeGame,
)


@pytest.fixture
def game() -> TicTacToeGame:
    """Create the grid variant."""
    return TicTacToeGame()


def play(game: TicTacToeGame, state: GridState, participants: list[Participant], positions: list[int]) -> GridState:
    """Play positions alternately, starting with slot 1."""
    for i, position in enumerate(positions):
        state = game.apply_move(state, participants[i % 2], {"position": position}).state
    return state


@pytest.mark.unit
class TestTicTacToeSetup:
    """Tests for initialization."""

    def test_initial_state(self, game: TicTacToeGame, participants: list[Participant]) -> None:
        """Test that a new game has an empty board with slot 1 to move."""
        state = game.initialize(participants)

        assert state.board == [None] * 9
        assert state.current_slot == 1
        assert state.phase == "playing"
        assert game.current_slot(state) == 1

    def test_rejects_single_player(self, game: TicTacToeGame, human: Participant) -> None:
        """Test that one participant is not enough."""
        with pytest.raises(SetupError):
            game.initialize([human])

    def test_rejects_gap_in_slots(self, game: TicTacToeGame, human: Participant) -> None:
        """Test that slots must be numbered 1..n."""
        other = Participant(participant_id="user-2", slot=3, display_name="Carol")

        with pytest.raises(SetupError):
            game.initialize([human, other])

    def test_rejects_duplicate_participant(self, game: TicTacToeGame, human: Participant) -> None:
        """Test that a participant cannot take both seats."""
        twin = human.model_copy(update={"slot": 2})

        with pytest.raises(SetupError):
            game.initialize([human, twin])


@pytest.mark.unit
class TestTicTacToeMoves:
    """Tests for move application."""

    def test_places_mark_and_switches_turn(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that a move places X and hands the turn to slot 2."""
        state = game.initialize(participants)

        outcome = game.apply_move(state, participants[0], {"position": 5})

        assert outcome.state.board[4] == "X"
        assert outcome.state.current_slot == 2
        assert outcome.state.move_count == 1
        assert outcome.description == "Placed X at position 5"

    def test_input_state_is_not_mutated(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that apply_move returns a new state."""
        state = game.initialize(participants)

        game.apply_move(state, participants[0], {"position": 1})

        assert state.board == [None] * 9
        assert state.current_slot == 1

    def test_occupied_cell_is_rejected(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that an occupied cell cannot be taken."""
        state = play(game, game.initialize(participants), participants, [5])

        with pytest.raises(IllegalMoveError, match="already occupied"):
            game.apply_move(state, participants[1], {"position": 5})

    @pytest.mark.parametrize("position", [0, 10, -1, "5", None])
    def test_invalid_position_is_rejected(
        self, game: TicTacToeGame, participants: list[Participant], position: object
    ) -> None:
        """Test that positions outside 1-9 are rejected."""
        state = game.initialize(participants)

        with pytest.raises(IllegalMoveError, match="between 1-9"):
            game.apply_move(state, participants[0], {"position": position})

    def test_out_of_turn_move_is_rejected(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that slot 2 cannot open the game."""
        state = game.initialize(participants)

        with pytest.raises(IllegalMoveError, match="not your turn"):
            game.apply_move(state, participants[1], {"position": 1})

    def test_no_cell_is_marked_twice_and_turns_alternate(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test the board invariant over a legal sequence with a rejected move."""
        state = game.initialize(participants)

        for position in [1, 5, 9, 3]:
            slot = state.current_slot
            state = game.apply_move(state, participants[slot - 1], {"position": position}).state
            assert state.current_slot != slot

        current = state.current_slot
        with pytest.raises(IllegalMoveError):
            game.apply_move(state, participants[current - 1], {"position": 9})
        assert state.current_slot == current
        assert sorted(cell for cell in state.board if cell) == ["O", "O", "X", "X"]


@pytest.mark.unit
class TestTicTacToeEnd:
    """Tests for end detection."""

    def test_top_row_wins_for_player_one(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that 1, 2, 3 wins for slot 1 with line [0, 1, 2]."""
        state = play(game, game.initialize(participants), participants, [1, 4, 2, 5, 3])

        result = game.check_end(state)

        assert result.ended is True
        assert result.winner_slot == 1
        assert result.reason == EndReason.WIN
        assert result.winning_line == [0, 1, 2]
        assert game.current_slot(state) is None

    def test_diagonal_win_for_player_two(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that slot 2 can win on the anti-diagonal."""
        state = play(game, game.initialize(participants), participants, [1, 3, 2, 5, 9, 7])

        result = game.check_end(state)

        assert result.winner_slot == 2
        assert result.winning_line == [2, 4, 6]

    def test_full_board_without_line_is_draw(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that a full board with no triple is a draw."""
        state = play(
            game, game.initialize(participants), participants, [1, 2, 3, 5, 4, 6, 8, 7, 9]
        )

        result = game.check_end(state)

        assert result.ended is True
        assert result.winner_slot is None
        assert result.reason == EndReason.DRAW

    def test_check_end_is_pure(self, game: TicTacToeGame, participants: list[Participant]) -> None:
        """Test that end detection does not change the state."""
        state = play(game, game.initialize(participants), participants, [1, 4, 2])
        before = state.model_dump()

        first = game.check_end(state)
        second = game.check_end(state)

        assert first == second
        assert first.ended is False
        assert state.model_dump() == before

    def test_no_moves_after_the_end(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that a finished game rejects further moves."""
        state = play(game, game.initialize(participants), participants, [1, 4, 2, 5, 3])

        with pytest.raises(IllegalMoveError, match="already over"):
            game.apply_move(state, participants[1], {"position": 9})

    def test_forfeit_hands_win_to_opponent(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that the remaining participant wins on forfeit."""
        state = play(game, game.initialize(participants), participants, [5])

        outcome = game.forfeit(state, participants[0], participants)

        assert outcome.winner_slot == 2
        result = game.check_end(outcome.state)
        assert result.reason == EndReason.FORFEIT
        assert result.winner_slot == 2
        assert game.render(outcome.state, participants).status == "Bot wins by forfeit!"


@pytest.mark.unit
class TestTicTacToeRendering:
    """Tests for rendering, legal moves and state round trips."""

    def test_initial_board_lists_positions(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test the empty board rendering and status line."""
        rendered = game.render(game.initialize(participants), participants)

        assert rendered.board == "1 | 2 | 3\n---------\n4 | 5 | 6\n---------\n7 | 8 | 9"
        assert rendered.status == "Alice's turn (X)"

    def test_winner_status(self, game: TicTacToeGame, participants: list[Participant]) -> None:
        """Test that the status names the winner."""
        state = play(game, game.initialize(participants), participants, [1, 4, 2, 5, 3])

        rendered = game.render(state, participants)

        assert rendered.board.startswith("X | X | X")
        assert rendered.status == "Alice wins!"

    def test_legal_moves_only_for_participant_on_turn(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that legal moves are empty cells for the mover and nothing otherwise."""
        state = play(game, game.initialize(participants), participants, [5])

        assert game.legal_moves(state, participants[1]) == ["1", "2", "3", "4", "6", "7", "8", "9"]
        assert game.legal_moves(state, participants[0]) == []

    def test_round_trip_preserves_behaviour(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test that dump and load reproduce legal moves and rendering."""
        state = play(game, game.initialize(participants), participants, [5, 1, 9])

        restored = game.load_state(game.dump_state(state))

        assert restored == state
        assert game.legal_moves(restored, participants[1]) == game.legal_moves(state, participants[1])
        assert game.render(restored, participants) == game.render(state, participants)

    def test_ai_context_shows_board_and_open_cells(
        self, game: TicTacToeGame, participants: list[Participant]
    ) -> None:
        """Test the facts handed to the AI prompt."""
        state = play(game, game.initialize(participants), participants, [5])

        context = game.ai_context(state, participants)

        assert context.player_slot == 2
        assert "4 | X | 6" in context.board
        assert context.available_moves == ["1", "2", "3", "4", "6", "7", "8", "9"]
        assert "You play O" in context.notes[0]
