# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Move resolution for human input and AI replies.

Human input is a raw token from the chat layer ("5", "powerup energy_drink")
that is coerced into the variant's payload shape or rejected.

AI replies are free text. They are resolved in three tiers:
1. An exact legal-move token in the reply ("Move: <x>" lines first)
2. A variant heuristic (bare cell numbers, spelled-out action names)
3. A uniform random legal move

Every AI turn with at least one legal move therefore yields a legal move.
"""

import logging
import random
import re
from dataclasses import dataclass
from typing import Any, Callable

from chatplay.domains.gaming.models import MoveSource, VariantName
from chatplay.domains.gaming.variants.base import MalformedInputError
from chatplay.domains.gaming.variants.resource import (
    BITE,
    CONTINUE,
    POWER_UP,
    READY,
    ROMANTIC,
    SABOTAGE,
    TARGETS,
    move_token,
    split_token,
)

logger = logging.getLogger(__name__)

GRID_INPUT = re.compile(r"^/?(?:move\s+)?(-?\d+)$", re.IGNORECASE)
GRID_CELL = re.compile(r"\b[1-9]\b")

ACTION_ALIASES: dict[str, str] = {
    "bite": BITE,
    "eat": BITE,
    "chomp": BITE,
    "ready": READY,
    "start": READY,
    "continue": CONTINUE,
    "next": CONTINUE,
    "power_up": POWER_UP,
    "powerup": POWER_UP,
    "boost": POWER_UP,
    "sabotage": SABOTAGE,
    "romantic": ROMANTIC,
    "romantic_move": ROMANTIC,
    "romance": ROMANTIC,
}

# Words in a free-text reply that point at a simple action
ACTION_KEYWORDS: dict[str, tuple[str, ...]] = {
    BITE: ("bite", "eat", "chomp"),
    READY: ("ready", "let's go", "start"),
    CONTINUE: ("continue", "next round"),
}


@dataclass
class ResolvedMove:
    """A decoded move.

    Attributes:
        token: Legal-move token.
        payload: Variant payload for apply_move().
        source: How the move was obtained.
    """

    token: str
    payload: dict[str, Any]
    source: MoveSource


def token_payload(variant: VariantName, token: str) -> dict[str, Any]:
    """Convert a legal-move token into the variant payload."""
    if variant == VariantName.TIC_TAC_TOE:
        return {"position": int(token)}
    return split_token(token)


class MoveResolver:
    """Decodes human input and AI replies into moves.

    Attributes:
        rng: Random source for the last-resort AI fallback.

    Example:
        resolver = MoveResolver()
        move = resolver.resolve_ai(VariantName.TIC_TAC_TOE, "Move: 5", ["1", "5"])
        move.token  # "5"
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._human_decoders: dict[VariantName, Callable[[str], ResolvedMove]] = {
            VariantName.TIC_TAC_TOE: self._decode_grid,
            VariantName.BIG_EATER: self._decode_resource,
        }
        self._heuristics: dict[VariantName, Callable[[str, list[str]], str | None]] = {
            VariantName.TIC_TAC_TOE: self._grid_heuristic,
            VariantName.BIG_EATER: self._resource_heuristic,
        }

    def resolve_human(self, variant: VariantName, raw_input: Any) -> ResolvedMove:
        """Coerce raw human input into a variant payload.

        Args:
            variant: Variant being played.
            raw_input: Raw token from the chat layer. Integers are accepted
                for grid positions.

        Returns:
            ResolvedMove with source HUMAN.

        Raises:
            MalformedInputError: If the input cannot be coerced.
        """
        text = str(raw_input).strip() if raw_input is not None else ""
        if not text:
            raise MalformedInputError("Please enter a move", variant=variant)
        return self._human_decoders[variant](text)

    def resolve_ai(
        self,
        variant: VariantName,
        reply: str,
        legal_moves: list[str],
    ) -> ResolvedMove:
        """Turn a model reply into a legal move.

        Args:
            variant: Variant being played.
            reply: Free-text model reply.
            legal_moves: Tokens the AI may play.

        Returns:
            ResolvedMove whose token is in legal_moves.

        Raises:
            MalformedInputError: If legal_moves is empty.
        """
        if not legal_moves:
            raise MalformedInputError("No legal moves available", variant=variant)

        text = reply or ""

        token = self._declared_move(text, legal_moves) or self._first_token(text, legal_moves)
        if token is not None:
            return ResolvedMove(token, token_payload(variant, token), MoveSource.AI_EXACT)

        token = self._heuristics[variant](text, legal_moves)
        if token is not None:
            logger.debug("AI reply resolved by %s heuristic: %s", variant.value, token)
            return ResolvedMove(token, token_payload(variant, token), MoveSource.AI_HEURISTIC)

        token = self._rng.choice(legal_moves)
        logger.info(
            "AI reply unparseable for %s, picked random move %s: %r",
            variant.value,
            token,
            text[:120],
        )
        return ResolvedMove(token, token_payload(variant, token), MoveSource.AI_RANDOM)

    # Tier 1

    def _declared_move(self, text: str, legal_moves: list[str]) -> str | None:
        """Look for a legal token on a "Move: <x>" line."""
        for line in text.splitlines():
            key, sep, value = line.strip().partition(":")
            if not sep or "move" not in key.lower():
                continue
            value = value.strip().strip(".!*`'\"").lower()
            for token in legal_moves:
                if value == token.lower():
                    return token
            found = self._first_token(value, legal_moves)
            if found is not None:
                return found
        return None

    def _first_token(self, text: str, legal_moves: list[str]) -> str | None:
        """Earliest legal token occurring in the text, longer tokens first on ties."""
        lowered = text.lower()
        best: tuple[int, int] | None = None
        found = None
        for token in legal_moves:
            index = lowered.find(token.lower())
            if index < 0:
                continue
            rank = (index, -len(token))
            if best is None or rank < best:
                best = rank
                found = token
        return found

    # Tier 2

    def _grid_heuristic(self, text: str, legal_moves: list[str]) -> str | None:
        for match in GRID_CELL.finditer(text):
            if match.group() in legal_moves:
                return match.group()
        return None

    def _resource_heuristic(self, text: str, legal_moves: list[str]) -> str | None:
        normalized = text.lower().replace("_", " ").replace("-", " ")
        best: tuple[int, int] | None = None
        found = None
        for token in legal_moves:
            for phrase in self._phrases_for(token):
                match = re.search(rf"\b{re.escape(phrase)}\b", normalized)
                if match is None:
                    continue
                rank = (match.start(), -len(phrase))
                if best is None or rank < best:
                    best = rank
                    found = token
        return found

    def _phrases_for(self, token: str) -> tuple[str, ...]:
        payload = split_token(token)
        target = payload.get("target")
        if target:
            return (target.replace("_", " "),)
        return ACTION_KEYWORDS.get(payload["action"], (payload["action"],))

    # Human decoders

    def _decode_grid(self, text: str) -> ResolvedMove:
        match = GRID_INPUT.match(text)
        if match is None:
            raise MalformedInputError(
                "Invalid position. Choose a number between 1-9",
                variant=VariantName.TIC_TAC_TOE,
                details={"input": text},
            )
        position = int(match.group(1))
        if position < 1 or position > 9:
            raise MalformedInputError(
                "Invalid position. Choose a number between 1-9",
                variant=VariantName.TIC_TAC_TOE,
                details={"input": text},
            )
        return ResolvedMove(str(position), {"position": position}, MoveSource.HUMAN)

    def _decode_resource(self, text: str) -> ResolvedMove:
        normalized = text.lower().lstrip("/").replace("-", "_")
        head, _, rest = normalized.replace(":", " ", 1).partition(" ")
        action = ACTION_ALIASES.get(head)
        if action is None:
            raise MalformedInputError(
                f"Unknown action '{head}'. Try: bite, powerup, sabotage, romantic, ready, continue",
                variant=VariantName.BIG_EATER,
                details={"input": text},
            )

        if action not in TARGETS:
            return ResolvedMove(action, {"action": action}, MoveSource.HUMAN)

        options = TARGETS[action]
        target = "_".join(rest.split())
        if not target:
            raise MalformedInputError(
                f"Choose one: {', '.join(options)}",
                variant=VariantName.BIG_EATER,
                details={"action": action},
            )
        if target not in options:
            raise MalformedInputError(
                f"Unknown option '{target}'. Choose one: {', '.join(options)}",
                variant=VariantName.BIG_EATER,
                details={"action": action, "target": target},
            )

        return ResolvedMove(
            move_token(action, target),
            {"action": action, "target": target},
            MoveSource.HUMAN,
        )
