# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Big Eater Competition variant.

A round-based eating contest for two players. Each round draws a food with
a difficulty and a bite target; players take turns biting, using power-ups,
playfully sabotaging each other or spending romantic moves. The player with
more lifetime bites after the last round wins; equal totals are a tie.

Phases: preparation -> eating -> results -> (preparation | ended)

Every random draw (food, story line, bite success) uses the injected
random.Random and its result is stored in the state, so a session can be
rebuilt from storage without replaying randomness.

The variant is stateless - all game state is passed via ResourceState objects.
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
    ensure_turn,
    remaining_winner_slot,
    validate_participants,
)

logger = logging.getLogger(__name__)

Phase = Literal["preparation", "eating", "results", "ended"]
Mood = Literal["excited", "focused", "tired", "stuffed"]

GAUGE_MAX = 100
MIN_BITE_ENERGY = 10
SPECIAL_MOVES = 3

# Bite success model
BASE_SUCCESS = 0.7
MIN_SUCCESS = 0.1
MAX_SUCCESS = 0.95

# Actions
BITE = "bite"
READY = "ready"
CONTINUE = "continue"
POWER_UP = "power_up"
SABOTAGE = "sabotage"
ROMANTIC = "romantic"


class Food(BaseModel):
    """A round's eating challenge."""

    name: str
    difficulty: int = Field(ge=1, le=5)
    bites: int = Field(ge=1, description="Combined bites that finish the round")
    description: str


FOODS: tuple[Food, ...] = (
    # Casual
    Food(name="Pizza Slices", difficulty=1, bites=4, description="Classic cheesy goodness"),
    Food(name="Burgers", difficulty=2, bites=6, description="Juicy and filling"),
    Food(name="Hot Dogs", difficulty=1, bites=3, description="Quick and easy"),
    Food(name="Spaghetti", difficulty=3, bites=8, description="Messy but delicious"),
    # Romantic
    Food(name="Chocolate Cake", difficulty=2, bites=5, description="Sweet like your love"),
    Food(name="Strawberries & Cream", difficulty=1, bites=3, description="Feed each other?"),
    Food(name="Champagne & Caviar", difficulty=4, bites=7, description="Fancy date night vibes"),
    Food(name="Heart-shaped Cookies", difficulty=1, bites=2, description="Made with love"),
    # Challenge
    Food(name="Spicy Wings", difficulty=4, bites=10, description="Test your heat tolerance!"),
    Food(name="Giant Steak", difficulty=5, bites=12, description="The ultimate challenge"),
    Food(name="Ramen Bowl", difficulty=3, bites=9, description="Slurp competition!"),
    Food(name="Taco Platter", difficulty=3, bites=8, description="Don't drop the filling!"),
    # Fun
    Food(name="Donuts", difficulty=2, bites=4, description="Sweet and sugary"),
    Food(name="Cheese Wheel", difficulty=4, bites=15, description="For true cheese lovers"),
    Food(name="Ice Cream Sundae", difficulty=2, bites=6, description="Brain freeze risk!"),
    Food(name="Giant Pretzel", difficulty=3, bites=7, description="Twist and shout!"),
)

POWER_UPS: dict[str, str] = {
    "energy_drink": "Restore 50 energy",
    "digestive_aid": "Boost digestion by 30",
    "focus_snack": "Restore 10 energy and get focused",
}

SABOTAGES: dict[str, str] = {
    "tickle": "Partner loses 10 energy laughing",
    "spice_surprise": "Extra spice costs partner 15 digestion",
    "brain_freeze": "Cold surprise leaves partner tired",
    "distraction_kiss": "Partner loses 5 energy, you both gain love points",
}

ROMANTIC_MOVES: dict[str, str] = {
    "feed_partner": "Feed your partner: +20 partner energy, love points for both",
    "motivational_speech": "Pep talk: +15 partner energy and excitement",
    "sacrifice_turn": "Give your partner 2 round bites",
    "victory_dance": "Dance together: +25 energy for you, couple bonus grows",
}

TARGETS: dict[str, dict[str, str]] = {
    POWER_UP: POWER_UPS,
    SABOTAGE: SABOTAGES,
    ROMANTIC: ROMANTIC_MOVES,
}

ROUND_STORIES = (
    "You sit across from each other, eyes sparkling with competitive spirit. "
    "The {food} sits between you, waiting to be conquered!",
    '"Think you can out-eat me?" comes the playful challenge. '
    "The {food} looks delicious and daunting.",
    "A good luck kiss across the table before the {food} battle begins. "
    '"May the best eater win!"',
    "The competitive fire burns in both your eyes as you stare down the {food}. "
    '"This is for the crown of our relationship!"',
    "Hand in hand, you take a moment to enjoy this silly moment together "
    "before diving into the {food} challenge.",
)

ENDINGS = (
    "After an epic eating battle, you both collapse laughing, covered in crumbs. "
    "Win or lose, love conquered all!",
    '"That was amazing!" you both say in unison, then burst into laughter.',
    'Despite the competition, it ends with a sweet kiss. "Same time next week?"',
    'Exhausted but happy, you agree it was the best date night ever.',
)


def move_token(action: str, target: str | None = None) -> str:
    """Build the legal-move token for an action."""
    return f"{action}:{target}" if target else action


def split_token(token: str) -> dict[str, Any]:
    """Turn a legal-move token back into a move payload."""
    action, _, target = token.partition(":")
    payload: dict[str, Any] = {"action": action}
    if target:
        payload["target"] = target
    return payload


class EaterState(BaseModel):
    """Per-player gauges.

    Attributes:
        slot: Player slot.
        name: Display name.
        round_bites: Bites this round.
        total_bites: Lifetime bites.
        energy: Energy gauge, 0-100.
        digestion: Digestion gauge, 0-100.
        mood: Mood tag.
        relationship_points: Love points earned.
        special_moves: Romantic moves left.
    """

    slot: int
    name: str
    round_bites: int = 0
    total_bites: int = 0
    energy: int = GAUGE_MAX
    digestion: int = GAUGE_MAX
    mood: Mood = "excited"
    relationship_points: int = 0
    special_moves: int = SPECIAL_MOVES


class RoundResult(BaseModel):
    """Outcome of a finished round. winner_slot is None on a tie."""

    round: int
    food: str
    bites: dict[int, int]
    winner_slot: int | None = None


class ResourceState(BaseModel):
    """Big Eater Competition game state.

    Attributes:
        round: Current round, 1-based.
        max_rounds: Rounds in the competition.
        round_turns: Eating actions allowed per round.
        countdown: Eating actions left this round.
        phase: Current phase.
        current_slot: Slot to act.
        food: Current challenge.
        eaters: Per-player gauges, ordered by slot.
        ready_slots: Slots that are ready to eat this round.
        couple_bonus: Shared cooperative counter.
        story: Narrative lines, one per round plus an ending.
        round_results: Finished rounds.
        romantic_moments: Romantic move log.
        winner_slot: Overall winner once ended, None on a tie.
        end_reason: Why the game ended.
    """

    round: int = 1
    max_rounds: int = 10
    round_turns: int = 20
    countdown: int = 20
    phase: Phase = "preparation"
    current_slot: int = 1
    food: Food | None = None
    eaters: list[EaterState] = Field(default_factory=list)
    ready_slots: list[int] = Field(default_factory=list)
    couple_bonus: int = 0
    story: list[str] = Field(default_factory=list)
    round_results: list[RoundResult] = Field(default_factory=list)
    romantic_moments: list[str] = Field(default_factory=list)
    winner_slot: int | None = None
    end_reason: EndReason | None = None

    def eater(self, slot: int) -> EaterState:
        """Get the gauges for a slot."""
        for eater in self.eaters:
            if eater.slot == slot:
                return eater
        raise KeyError(slot)

    def partner_of(self, slot: int) -> EaterState:
        """Get the other player's gauges."""
        for eater in self.eaters:
            if eater.slot != slot:
                return eater
        raise KeyError(slot)


def _clamp(value: int) -> int:
    return max(0, min(GAUGE_MAX, value))


def _settle_mood(eater: EaterState) -> None:
    """Derive mood from depleted gauges."""
    if eater.digestion < 30:
        eater.mood = "stuffed"
    elif eater.energy < 30:
        eater.mood = "tired"
    elif eater.mood in ("tired", "stuffed"):
        eater.mood = "focused"


def bite_success_chance(eater: EaterState, food: Food) -> float:
    """Probability that a bite lands.

    Starts at 0.7, adjusted by energy, digestion, mood and food
    difficulty, then clamped to [0.1, 0.95].
    """
    chance = BASE_SUCCESS

    if eater.energy > 80:
        chance += 0.2
    elif eater.energy < 30:
        chance -= 0.3

    if eater.digestion > 80:
        chance += 0.1
    elif eater.digestion < 30:
        chance -= 0.2

    if eater.mood == "excited":
        chance += 0.1
    elif eater.mood == "tired":
        chance -= 0.2

    chance -= (food.difficulty - 1) * 0.1

    return max(MIN_SUCCESS, min(MAX_SUCCESS, chance))


def round_opener(round_number: int) -> int:
    """Slot that opens a round. Players alternate opening rounds."""
    return ((round_number - 1) % 2) + 1


class BigEaterGame:
    """Big Eater Competition for two players.

    Moves are payloads {"action": str, "target": str | None}; legal-move
    tokens are "bite", "ready", "continue" or "<action>:<target>".

    Example:
        game = BigEaterGame(max_rounds=3)
        state = game.initialize(participants, rng=random.Random(7))
        outcome = game.apply_move(state, alice, {"action": "ready"})
    """

    name = VariantName.BIG_EATER
    display_name = "Big Eater Competition"
    min_players = 2
    max_players = 2

    def __init__(self, max_rounds: int = 10, round_turns: int = 20) -> None:
        """Initialize the variant.

        Args:
            max_rounds: Rounds in new competitions.
            round_turns: Eating actions allowed per round in new competitions.
        """
        self._max_rounds = max_rounds
        self._round_turns = round_turns

    def info(self) -> VariantInfo:
        """Describe the game for listings and help screens."""
        return VariantInfo(
            name=self.name,
            display_name=self.display_name,
            description="Romantic competitive eating game for couples",
            min_players=self.min_players,
            max_players=self.max_players,
            estimated_duration="20m",
            rules=[
                "Compete with your partner in eating challenges",
                "Take bites to score; bites get harder as energy and digestion drop",
                "Use power-ups, playful sabotage, and romantic moves",
                f"Each player has {SPECIAL_MOVES} romantic moves per game",
                "Whoever eats the most bites over all rounds wins",
            ],
            commands=[
                "ready: Start eating this round",
                "bite: Take a bite of food",
                "powerup <type>: Use a power-up (" + ", ".join(POWER_UPS) + ")",
                "sabotage <type>: Playfully sabotage partner (" + ", ".join(SABOTAGES) + ")",
                "romantic <move>: Use a romantic move (" + ", ".join(ROMANTIC_MOVES) + ")",
                "continue: Move on to the next round",
            ],
        )

    def initialize(
        self,
        participants: Sequence[Participant],
        rng: random.Random | None = None,
    ) -> ResourceState:
        """Create round 1 in the preparation phase.

        Raises:
            SetupError: If the participants do not fill exactly two slots.
        """
        ordered = validate_participants(
            participants, self.name, self.min_players, self.max_players
        )
        rng = rng or random.Random()

        state = ResourceState(
            max_rounds=self._max_rounds,
            round_turns=self._round_turns,
            countdown=self._round_turns,
            eaters=[EaterState(slot=p.slot, name=p.display_name) for p in ordered],
        )
        self._start_preparation(state, rng)
        return state

    def load_state(self, data: dict[str, Any]) -> ResourceState:
        """Rebuild state from its stored form."""
        return ResourceState.model_validate(data)

    def dump_state(self, state: ResourceState) -> dict[str, Any]:
        """Convert state to a JSON-compatible dict."""
        return state.model_dump(mode="json")

    def current_slot(self, state: ResourceState) -> int | None:
        """Get the slot to act, None once the game has ended."""
        if state.phase == "ended":
            return None
        return state.current_slot

    def apply_move(
        self,
        state: ResourceState,
        participant: Participant,
        payload: dict[str, Any],
        rng: random.Random | None = None,
    ) -> MoveOutcome[ResourceState]:
        """Apply one action for the participant.

        Args:
            state: Current state. Not modified.
            participant: Participant acting.
            payload: {"action": str, "target": str | None}.
            rng: Random source for bite success and the next round's draw.

        Returns:
            MoveOutcome with the new state and narrative events.

        Raises:
            IllegalMoveError: If it is not the participant's turn, the action
                does not fit the phase, or its requirements are not met.
        """
        ensure_turn(self.current_slot(state), participant, self.name)

        if not isinstance(payload, dict) or not isinstance(payload.get("action"), str):
            raise IllegalMoveError(
                "Invalid action",
                variant=self.name,
                details={"payload": payload},
            )

        action = payload["action"]
        target = payload.get("target")
        rng = rng or random.Random()
        new_state = state.model_copy(deep=True)
        slot = participant.slot

        if new_state.phase == "preparation":
            self._require(action == READY, "Get ready first! Send 'ready' to start eating.")
            description, events = self._ready(new_state, slot)
        elif new_state.phase == "results":
            self._require(action == CONTINUE, "Round over! Send 'continue' for the next round.")
            new_state.round += 1
            self._start_preparation(new_state, rng)
            new_state.current_slot = round_opener(new_state.round)
            description = f"Round {new_state.round} begins"
            events = [f"Round {new_state.round}: {new_state.food.name} Challenge!"]
            return MoveOutcome(state=new_state, description=description, events=events)
        else:
            description, events = self._eat(new_state, slot, action, target, rng)
            new_state.countdown -= 1
            if self._round_finished(new_state):
                events.extend(self._end_round(new_state, rng))
                if new_state.phase == "results":
                    new_state.current_slot = 2 if slot == 1 else 1
                return MoveOutcome(state=new_state, description=description, events=events)

        new_state.current_slot = 2 if slot == 1 else 1
        return MoveOutcome(state=new_state, description=description, events=events)

    def check_end(self, state: ResourceState) -> EndCheck:
        """Report the overall winner once the last round is over."""
        if state.phase != "ended":
            return EndCheck(ended=False)

        if state.end_reason == EndReason.FORFEIT:
            return EndCheck(
                ended=True,
                winner_slot=state.winner_slot,
                reason=EndReason.FORFEIT,
            )

        return EndCheck(
            ended=True,
            winner_slot=self._leader(state),
            reason=EndReason.EXHAUSTED_ROUNDS,
        )

    def render(
        self,
        state: ResourceState,
        participants: Sequence[Participant],
    ) -> RenderedState:
        """Render the scoreboard and a one-line status."""
        lines = [f"Big Eater Competition - Round {state.round}/{state.max_rounds}", ""]

        if state.food is not None:
            lines.append(
                f"Current challenge: {state.food.name} "
                f"(difficulty {state.food.difficulty}/5, {state.food.bites} bites)"
            )
            lines.append(state.food.description)
            if state.phase == "eating":
                eaten = sum(e.round_bites for e in state.eaters)
                lines.append(
                    f"Bites left: {max(0, state.food.bites - eaten)}"
                    f" | Actions left: {state.countdown}"
                )
            lines.append("")

        for eater in state.eaters:
            lines.extend(
                [
                    eater.name,
                    f"  Round bites: {eater.round_bites}",
                    f"  Total bites: {eater.total_bites}",
                    f"  Energy: {eater.energy}/{GAUGE_MAX}",
                    f"  Digestion: {eater.digestion}/{GAUGE_MAX}",
                    f"  Mood: {eater.mood}",
                    f"  Love points: {eater.relationship_points}",
                    f"  Romantic moves left: {eater.special_moves}",
                    "",
                ]
            )

        lines.append(f"Couple bonus: {state.couple_bonus}")
        lines.append(f"Phase: {state.phase}")
        if state.story:
            lines.append("")
            lines.append(f"Story: {state.story[-1]}")

        return RenderedState(board="\n".join(lines), status=self._status(state))

    def legal_moves(self, state: ResourceState, participant: Participant) -> list[str]:
        """List the tokens the participant may play now."""
        if self.current_slot(state) != participant.slot:
            return []

        if state.phase == "preparation":
            return [READY]
        if state.phase == "results":
            return [CONTINUE]

        eater = state.eater(participant.slot)
        moves: list[str] = []
        if eater.energy >= MIN_BITE_ENERGY:
            moves.append(BITE)
        moves.extend(move_token(POWER_UP, name) for name in POWER_UPS)
        moves.extend(move_token(SABOTAGE, name) for name in SABOTAGES)
        if eater.special_moves > 0:
            moves.extend(move_token(ROMANTIC, name) for name in ROMANTIC_MOVES)
        return moves

    def ai_context(
        self,
        state: ResourceState,
        participants: Sequence[Participant],
    ) -> VariantContext:
        """Scoreboard, gauges and legal tokens for the AI prompt."""
        slot = state.current_slot
        me = state.eater(slot)
        partner = state.partner_of(slot)
        seat = next((p for p in participants if p.slot == slot), None)
        available = (
            self.legal_moves(state, seat) if seat is not None else []
        )

        notes = [f"Round {state.round}/{state.max_rounds}, phase: {state.phase}."]
        if state.food is not None:
            notes.append(
                f"Food: {state.food.name} (difficulty {state.food.difficulty}, "
                f"{state.food.bites} bites to finish the round)."
            )
        if state.phase == "eating":
            notes.append(f"Actions left this round: {state.countdown}.")
        for label, eater in (("You", me), ("Partner", partner)):
            notes.append(
                f"{label} ({eater.name}): {eater.round_bites} bites this round, "
                f"{eater.total_bites} total, energy {eater.energy}, "
                f"digestion {eater.digestion}, mood {eater.mood}, "
                f"{eater.special_moves} romantic moves left."
            )

        return VariantContext(
            board=self.render(state, participants).board,
            player_slot=slot,
            available_moves=available,
            notes=notes,
            instructions="Pick exactly one of the available moves, written as shown.",
        )

    def forfeit(
        self,
        state: ResourceState,
        participant: Participant,
        participants: Sequence[Participant],
    ) -> ForfeitOutcome[ResourceState]:
        """End the competition with the remaining participant as winner."""
        winner_slot = remaining_winner_slot(participant, participants)
        new_state = state.model_copy(deep=True)
        new_state.phase = "ended"
        new_state.winner_slot = winner_slot
        new_state.end_reason = EndReason.FORFEIT
        return ForfeitOutcome(state=new_state, winner_slot=winner_slot)

    # Phase handlers. All of them mutate the deep copy made in apply_move().

    def _require(self, condition: bool, message: str) -> None:
        if not condition:
            raise IllegalMoveError(message, variant=self.name)

    def _start_preparation(self, state: ResourceState, rng: random.Random) -> None:
        state.phase = "preparation"
        state.ready_slots = []
        state.countdown = state.round_turns
        for eater in state.eaters:
            eater.round_bites = 0

        max_difficulty = min(state.round + 1, 5)
        foods = [food for food in FOODS if food.difficulty <= max_difficulty]
        state.food = rng.choice(foods).model_copy()
        state.story.append(rng.choice(ROUND_STORIES).format(food=state.food.name))

    def _ready(self, state: ResourceState, slot: int) -> tuple[str, list[str]]:
        eater = state.eater(slot)
        if slot not in state.ready_slots:
            state.ready_slots.append(slot)

        events = [f"{eater.name} is ready to eat!"]
        if len(state.ready_slots) == len(state.eaters):
            state.phase = "eating"
            state.countdown = state.round_turns
            events.append(f"Round {state.round}: the {state.food.name} battle begins!")
        return f"{eater.name} is ready", events

    def _eat(
        self,
        state: ResourceState,
        slot: int,
        action: str,
        target: Any,
        rng: random.Random,
    ) -> tuple[str, list[str]]:
        eater = state.eater(slot)
        partner = state.partner_of(slot)

        if action == BITE:
            return self._bite(state, eater, rng)

        if action not in TARGETS:
            raise IllegalMoveError(
                f"Invalid action '{action}' during the eating phase",
                variant=self.name,
            )
        options = TARGETS[action]
        if not isinstance(target, str) or target not in options:
            raise IllegalMoveError(
                f"Unknown {action.replace('_', '-')}. Choose one of: {', '.join(options)}",
                variant=self.name,
                details={"target": target},
            )

        if action == POWER_UP:
            return self._power_up(eater, target)
        if action == SABOTAGE:
            return self._sabotage(eater, partner, target)
        return self._romantic(state, eater, partner, target)

    def _bite(
        self,
        state: ResourceState,
        eater: EaterState,
        rng: random.Random,
    ) -> tuple[str, list[str]]:
        if eater.energy < MIN_BITE_ENERGY:
            raise IllegalMoveError(
                "Too tired to eat! Use a power-up first.",
                variant=self.name,
            )

        chance = bite_success_chance(eater, state.food)
        if rng.random() < chance:
            eater.round_bites += 1
            eater.total_bites += 1
            eater.energy = _clamp(eater.energy - 8)
            eater.digestion = _clamp(eater.digestion - 5)
            _settle_mood(eater)
            return (
                f"{eater.name} takes a big bite of {state.food.name}!",
                [
                    f"{eater.name} takes a successful bite! "
                    f"({eater.round_bites} this round)"
                ],
            )

        eater.energy = _clamp(eater.energy - 3)
        _settle_mood(eater)
        return (
            f"{eater.name} struggles with a bite",
            [f"{eater.name} struggles with a bite but keeps fighting!"],
        )

    def _power_up(self, eater: EaterState, name: str) -> tuple[str, list[str]]:
        if name == "energy_drink":
            eater.energy = _clamp(eater.energy + 50)
        elif name == "digestive_aid":
            eater.digestion = _clamp(eater.digestion + 30)
        else:
            eater.energy = _clamp(eater.energy + 10)
            eater.mood = "focused"
        _settle_mood(eater)

        label = name.replace("_", " ")
        return f"{eater.name} uses {label}", [f"{eater.name} powers up with {label}!"]

    def _sabotage(
        self,
        eater: EaterState,
        partner: EaterState,
        name: str,
    ) -> tuple[str, list[str]]:
        if name == "tickle":
            partner.energy = _clamp(partner.energy - 10)
        elif name == "spice_surprise":
            partner.digestion = _clamp(partner.digestion - 15)
        elif name == "brain_freeze":
            partner.mood = "tired"
        else:
            partner.energy = _clamp(partner.energy - 5)
            eater.relationship_points += 2
            partner.relationship_points += 2

        label = name.replace("_", " ")
        return (
            f"{eater.name} hits {partner.name} with {label}",
            [f"{eater.name} plays a {label} on {partner.name}!"],
        )

    def _romantic(
        self,
        state: ResourceState,
        eater: EaterState,
        partner: EaterState,
        name: str,
    ) -> tuple[str, list[str]]:
        if eater.special_moves <= 0:
            raise IllegalMoveError("No romantic moves left!", variant=self.name)
        eater.special_moves -= 1

        if name == "feed_partner":
            partner.energy = _clamp(partner.energy + 20)
            eater.relationship_points += 5
            partner.relationship_points += 5
            state.couple_bonus += 10
            message = f"{eater.name} lovingly feeds {partner.name} a bite!"
        elif name == "motivational_speech":
            partner.energy = _clamp(partner.energy + 15)
            partner.mood = "excited"
            eater.relationship_points += 3
            message = f"{eater.name} gives {partner.name} an inspiring pep talk!"
        elif name == "sacrifice_turn":
            partner.round_bites += 2
            eater.relationship_points += 8
            partner.relationship_points += 8
            message = f"{eater.name} sacrifices a turn to help {partner.name} eat more!"
        else:
            eater.energy = _clamp(eater.energy + 25)
            eater.mood = "excited"
            state.couple_bonus += 15
            message = f"{eater.name} and {partner.name} break into a silly victory dance!"

        state.romantic_moments.append(f"Round {state.round}: {message}")
        return message, [f"{eater.name} used romantic move: {name}"]

    def _round_finished(self, state: ResourceState) -> bool:
        eaten = sum(e.round_bites for e in state.eaters)
        return eaten >= state.food.bites or state.countdown <= 0

    def _end_round(self, state: ResourceState, rng: random.Random) -> list[str]:
        first, second = state.eaters[0], state.eaters[1]
        if first.round_bites > second.round_bites:
            winner = first
        elif second.round_bites > first.round_bites:
            winner = second
        else:
            winner = None

        state.round_results.append(
            RoundResult(
                round=state.round,
                food=state.food.name,
                bites={e.slot: e.round_bites for e in state.eaters},
                winner_slot=winner.slot if winner else None,
            )
        )
        score = f"{first.round_bites}-{second.round_bites}"
        events = [
            f"Round {state.round} goes to {winner.name} ({score})!"
            if winner
            else f"Round {state.round} is a tie ({score})!"
        ]

        if state.round >= state.max_rounds:
            state.phase = "ended"
            state.end_reason = EndReason.EXHAUSTED_ROUNDS
            state.winner_slot = self._leader(state)
            state.story.append(rng.choice(ENDINGS))
            events.append("The competition is over!")
        else:
            state.phase = "results"
        return events

    def _leader(self, state: ResourceState) -> int | None:
        first, second = state.eaters[0], state.eaters[1]
        if first.total_bites > second.total_bites:
            return first.slot
        if second.total_bites > first.total_bites:
            return second.slot
        return None

    def _status(self, state: ResourceState) -> str:
        if state.phase == "ended":
            if state.end_reason == EndReason.FORFEIT:
                if state.winner_slot is None:
                    return "Competition abandoned."
                return f"{state.eater(state.winner_slot).name} wins by forfeit!"
            leader = self._leader(state)
            if leader is None:
                total = state.eaters[0].total_bites
                return f"It's a tie at {total} bites each!"
            winner = state.eater(leader)
            return f"{winner.name} wins the competition with {winner.total_bites} bites!"

        name = state.eater(state.current_slot).name
        if state.phase == "preparation":
            return f"Round {state.round} - preparation: {name} to get ready"
        if state.phase == "results":
            last = state.round_results[-1]
            result = (
                f"{state.eater(last.winner_slot).name} won the round"
                if last.winner_slot
                else "the round was a tie"
            )
            return f"Round {state.round} - results: {result}. {name} to continue"
        return f"Round {state.round} - eating: {name}'s turn"

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"{self.__class__.__name__}(name={self.name.value}, "
            f"max_rounds={self._max_rounds})"
        )
