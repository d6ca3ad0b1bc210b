# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tic Tac Toe variant.

This module provides the grid game:
- Standard 3x3 rules, slot 1 plays X and moves first
- Win detection over eight lines, draw on a full board
- Plain-text board with empty cells labelled 1-9

The variant is stateless - all game state is passed via GridState objects.
"""

import logging
import random
from typing import Any, Literal, Sequence

from pydantic import BaseModel, Field

from chatplay.domains.gaming.models import (
    EndCheck,
    EndReason,
    Participant,
    RenderedState,
    VariantName,
)
from chatplay.domains.gaming.variants.base import (
    ForfeitOutcome,
    IllegalMoveError,
    MoveOutcome,
    VariantContext,
    VariantInfo,
    display_name_for_slot,
    ensure_turn,
    remaining_winner_slot,
    validate_participants,
)

logger = logging.getLogger(__name__)

CELLS = 9

# Slot 1 plays X, slot 2 plays O
MARKS = {1: "X", 2: "O"}

WIN_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)


class GridState(BaseModel):
    """Tic Tac Toe game state.

    Attributes:
        board: Nine cells, each None or a mark ("X"/"O"), row-major.
        current_slot: Slot to move.
        phase: "playing" or "ended".
        move_count: Marks placed so far.
        winner_slot: Winning slot once ended, None for draws.
        winning_line: Cell indices of the winning line.
        end_reason: Why the game ended.
    """

    board: list[str | None] = Field(
        default_factory=lambda: [None] * CELLS,
        min_length=CELLS,
        max_length=CELLS,
    )
    current_slot: int = 1
    phase: Literal["playing", "ended"] = "playing"
    move_count: int = 0
    winner_slot: int | None = None
    winning_line: list[int] | None = None
    end_reason: EndReason | None = None


class TicTacToeGame:
    """Tic Tac Toe on a 3x3 grid.

    Positions are 1-based in the user-facing tokens and payloads
    and 0-based in the board list.

    Example:
        game = TicTacToeGame()
        state = game.initialize(participants)
        outcome = game.apply_move(state, alice, {"position": 5})
        game.check_end(outcome.state)
    """

    name = VariantName.TIC_TAC_TOE
    display_name = "Tic Tac Toe"
    min_players = 2
    max_players = 2

    def info(self) -> VariantInfo:
        """Describe the game for listings and help screens."""
        return VariantInfo(
            name=self.name,
            display_name=self.display_name,
            description="Classic 3x3 grid game where players take turns placing X or O",
            min_players=self.min_players,
            max_players=self.max_players,
            estimated_duration="5m",
            rules=[
                "Players take turns placing their symbol (X or O) on a 3x3 grid",
                "First player to get 3 symbols in a row (horizontal, vertical, "
                "or diagonal) wins",
                "If all 9 squares are filled without a winner, the game is a draw",
                "Choose a position by sending a number from 1-9",
            ],
            commands=[
                "<position>: Place your symbol at position 1-9",
                "board: Show current board state",
                "quit: Forfeit the current game",
            ],
        )

    def initialize(
        self,
        participants: Sequence[Participant],
        rng: random.Random | None = None,
    ) -> GridState:
        """Create an empty board with slot 1 to move.

        Raises:
            SetupError: If the participants do not fill exactly two slots.
        """
        validate_participants(participants, self.name, self.min_players, self.max_players)
        return GridState()

    def load_state(self, data: dict[str, Any]) -> GridState:
        """Rebuild state from its stored form."""
        return GridState.model_validate(data)

    def dump_state(self, state: GridState) -> dict[str, Any]:
        """Convert state to a JSON-compatible dict."""
        return state.model_dump(mode="json")

    def current_slot(self, state: GridState) -> int | None:
        """Get the slot to move, None once the game has ended."""
        if state.phase == "ended":
            return None
        return state.current_slot

    def apply_move(
        self,
        state: GridState,
        participant: Participant,
        payload: dict[str, Any],
        rng: random.Random | None = None,
    ) -> MoveOutcome[GridState]:
        """Place the participant's mark.

        Args:
            state: Current state. Not modified.
            participant: Participant making the move.
            payload: {"position": int} with a 1-based position.
            rng: Unused; grid moves are deterministic.

        Returns:
            MoveOutcome with the new state.

        Raises:
            IllegalMoveError: If it is not the participant's turn, the game is
                over, the position is invalid, or the cell is occupied.
        """
        ensure_turn(self.current_slot(state), participant, self.name)

        position = payload.get("position") if isinstance(payload, dict) else None
        if isinstance(position, bool) or not isinstance(position, int):
            raise IllegalMoveError(
                "Invalid position. Choose a number between 1-9",
                variant=self.name,
                details={"payload": payload},
            )
        if position < 1 or position > CELLS:
            raise IllegalMoveError(
                "Invalid position. Choose a number between 1-9",
                variant=self.name,
                details={"position": position},
            )

        index = position - 1
        if state.board[index] is not None:
            raise IllegalMoveError(
                "Position already occupied",
                variant=self.name,
                details={"position": position},
            )

        mark = MARKS[participant.slot]
        board = list(state.board)
        board[index] = mark

        new_state = state.model_copy(
            update={
                "board": board,
                "move_count": state.move_count + 1,
            }
        )

        result = self._evaluate(board)
        if result.ended:
            new_state.phase = "ended"
            new_state.winner_slot = result.winner_slot
            new_state.winning_line = result.winning_line
            new_state.end_reason = result.reason
        else:
            new_state.current_slot = 2 if state.current_slot == 1 else 1

        return MoveOutcome(
            state=new_state,
            description=f"Placed {mark} at position {position}",
        )

    def check_end(self, state: GridState) -> EndCheck:
        """Detect a win or draw from the board."""
        if state.end_reason == EndReason.FORFEIT:
            return EndCheck(
                ended=True,
                winner_slot=state.winner_slot,
                reason=EndReason.FORFEIT,
            )
        return self._evaluate(state.board)

    def render(
        self,
        state: GridState,
        participants: Sequence[Participant],
    ) -> RenderedState:
        """Render the board with empty cells labelled by position."""
        rows = []
        for row in range(3):
            cells = [
                state.board[row * 3 + col] or str(row * 3 + col + 1)
                for col in range(3)
            ]
            rows.append(" | ".join(cells))
        board = "\n---------\n".join(rows)

        result = self.check_end(state)
        if result.ended:
            if result.winner_slot is not None:
                winner = display_name_for_slot(participants, result.winner_slot)
                status = f"{winner} wins!"
                if result.reason == EndReason.FORFEIT:
                    status = f"{winner} wins by forfeit!"
            elif result.reason == EndReason.FORFEIT:
                status = "Game abandoned."
            else:
                status = "It's a draw!"
        else:
            name = display_name_for_slot(participants, state.current_slot)
            status = f"{name}'s turn ({MARKS[state.current_slot]})"

        return RenderedState(board=board, status=status)

    def legal_moves(self, state: GridState, participant: Participant) -> list[str]:
        """List empty positions as "1"-"9" tokens, ascending."""
        if self.current_slot(state) != participant.slot:
            return []
        return [str(i + 1) for i, cell in enumerate(state.board) if cell is None]

    def ai_context(
        self,
        state: GridState,
        participants: Sequence[Participant],
    ) -> VariantContext:
        """Board, slot and open positions for the AI prompt."""
        slot = state.current_slot
        available = [str(i + 1) for i, cell in enumerate(state.board) if cell is None]
        return VariantContext(
            board=self.render(state, participants).board,
            player_slot=slot,
            available_moves=available if state.phase == "playing" else [],
            notes=[f"You play {MARKS[slot]}. Cells are numbered 1-9, left to right, top to bottom."],
            instructions="Answer with the number of the cell you take.",
        )

    def forfeit(
        self,
        state: GridState,
        participant: Participant,
        participants: Sequence[Participant],
    ) -> ForfeitOutcome[GridState]:
        """End the game with the remaining participant as winner."""
        winner_slot = remaining_winner_slot(participant, participants)
        new_state = state.model_copy(
            update={
                "phase": "ended",
                "winner_slot": winner_slot,
                "winning_line": None,
                "end_reason": EndReason.FORFEIT,
            }
        )
        return ForfeitOutcome(state=new_state, winner_slot=winner_slot)

    def _evaluate(self, board: list[str | None]) -> EndCheck:
        """Check the eight lines, then the draw condition."""
        for line in WIN_LINES:
            a, b, c = line
            if board[a] is not None and board[a] == board[b] == board[c]:
                winner_slot = 1 if board[a] == MARKS[1] else 2
                return EndCheck(
                    ended=True,
                    winner_slot=winner_slot,
                    reason=EndReason.WIN,
                    winning_line=list(line),
                )

        if all(cell is not None for cell in board):
            return EndCheck(ended=True, winner_slot=None, reason=EndReason.DRAW)

        return EndCheck(ended=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"{self.__class__.__name__}(name={self.name.value})"
