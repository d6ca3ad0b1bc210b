# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""AI turn context model.

This module provides the AIMoveContext model that captures what the language
model needs to choose a move: the board, the recent move log, the AI's seat
and the legal moves. It is derived fresh for every AI turn and never stored.
"""

from pydantic import BaseModel, Field


class RecentMove(BaseModel):
    """A move from the log, as shown to the AI.

    Attributes:
        player: Display name of the player who moved.
        description: Human-readable move description.
    """

    player: str = Field(description="Who made the move")
    description: str = Field(description="What the move did")


class AIMoveContext(BaseModel):
    """Complete context for one AI move.

    Attributes:
        game_name: Display name of the variant.
        board: Plain-text board.
        player_slot: Slot the AI plays.
        player_name: Display name of the AI seat.
        available_moves: Legal tokens, in order.
        recent_moves: Last few moves of the log, oldest first.
        notes: Extra situation lines from the variant.
        instructions: Variant guidance on the answer format.

    Example:
        context = AIMoveContext(
            game_name="Tic Tac Toe",
            board="X | 2 | 3\\n---------\\n...",
            player_slot=2,
            player_name="AI",
            available_moves=["2", "3"],
        )
        prompt = context.to_prompt()
    """

    game_name: str
    board: str
    player_slot: int
    player_name: str
    available_moves: list[str] = Field(default_factory=list)
    recent_moves: list[RecentMove] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)
    instructions: str | None = None

    def to_prompt(self) -> str:
        """Render the context as the move prompt.

        Returns:
            Prompt text ending with the request to choose a move.
        """
        prompt = f"You are playing {self.game_name}. Here's the current game state:\n\n"
        prompt += f"Board:\n{self.board}\n\n"

        if self.notes:
            prompt += "\n".join(self.notes) + "\n\n"

        if self.recent_moves:
            prompt += "Recent moves:\n"
            for move in self.recent_moves:
                prompt += f"- {move.player}: {move.description}\n"
            prompt += "\n"

        prompt += f"It's your turn (Player {self.player_slot})."
        if self.available_moves:
            prompt += f" Available moves: {', '.join(self.available_moves)}"

        if self.instructions:
            prompt += f"\n{self.instructions}"

        prompt += '\nStart with a line "Move: <your move>".'
        prompt += "\n\nChoose your move and explain your strategy briefly:"
        return prompt
