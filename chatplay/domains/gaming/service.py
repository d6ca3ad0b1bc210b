# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Game Session Service.

This service runs human-vs-AI game sessions:
- Create a session for a variant and its participants
- Reconstruct playable instances from storage
- Process human moves and chain the AI reply in the same call
- Play the AI turn on demand
- End, forfeit and cancel sessions
- Build presentation-ready views and move history

The service integrates with:
- Game variants (via the VariantRegistry) for rules and rendering
- LLM (via a TextGenerator) for AI moves, resolved by MoveResolver
- GameStore for persistence

Storage is authoritative. Reconstructed instances may be cached in process
memory; the cache is dropped whenever a session ends or a write fails.
"""

import logging
import random
from typing import Any, Callable, Sequence

from chatplay.core.config.settings import Settings, get_settings
from chatplay.core.intelligence.llm import GenerationError, LLMClient, TextGenerator
from chatplay.domains.gaming.context_builder import AIContextBuilder
from chatplay.domains.gaming.instance import GameInstance
from chatplay.domains.gaming.models import (
    EndReason,
    GameOutcome,
    GameSessionRecord,
    GameView,
    MoveRecord,
    MoveResult,
    MoveSource,
    Participant,
    SessionStatus,
    TurnSummary,
)
from chatplay.domains.gaming.resolver import MoveResolver, ResolvedMove
from chatplay.domains.gaming.store import GameStore
from chatplay.domains.gaming.variants import (
    GameError,
    IllegalMoveError,
    VariantInfo,
    VariantRegistry,
    get_variant_registry,
    participant_for_slot,
)
from chatplay.infrastructure.database.connection import PersistenceError
from chatplay.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class GameServiceError(Exception):
    """Base exception for game service errors."""

    pass


class GameNotFoundError(GameServiceError):
    """Raised when a game session is not found."""

    pass


class GameSessionService:
    """Service for running game sessions.

    Manages the lifecycle of a session:
    1. Create - validates participants, persists the session and its state
    2. Submit move - applies a human move, then lets the AI answer
    3. AI turn - plays the AI seat when it is due
    4. End / forfeit / cancel - closes the session and records results

    Example:
        >>> service = GameSessionService(store=SQLAlchemyGameStore(get_sessionmaker()))
        >>> session_id = await service.create_session("tic_tac_toe", participants)
        >>> result = await service.submit_move(session_id, "user-1", "5")
    """

    def __init__(
        self,
        store: GameStore,
        generator: TextGenerator | None = None,
        generator_factory: Callable[[str | None], TextGenerator] | None = None,
        registry: VariantRegistry | None = None,
        resolver: MoveResolver | None = None,
        context_builder: AIContextBuilder | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Persistence backend.
            generator: Text generator used for every session. Takes
                precedence over generator_factory.
            generator_factory: Builds a generator for a session's model.
                Defaults to an LLMClient per model.
            registry: Variant registry (uses default if None).
            resolver: Move resolver (created from rng if None).
            context_builder: AI context builder (created from settings if None).
            settings: Application settings (uses cached settings if None).
            rng: Random source shared by variants and the resolver.
        """
        self._settings = settings or get_settings()
        self._store = store
        self._generator = generator
        self._generator_factory = generator_factory or (lambda model: LLMClient(model=model))
        self._registry = registry or get_variant_registry()
        self._rng = rng or random.Random()
        self._resolver = resolver or MoveResolver(rng=self._rng)
        self._context_builder = context_builder or AIContextBuilder(
            recent_moves=self._settings.game.recent_moves_in_prompt,
        )
        # Generators per model (lazy initialization)
        self._generators: dict[str | None, TextGenerator] = {}
        self._instances: dict[str, GameInstance] = {}

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    async def create_session(
        self,
        variant_name: str,
        participants: Sequence[Participant],
        llm_model: str | None = None,
    ) -> str:
        """Create and start a game session.

        Args:
            variant_name: Variant name or display name.
            participants: Seats, one of which is normally the AI.
            llm_model: Model for the AI seat (settings default if None).

        Returns:
            The new session id.

        Raises:
            UnsupportedVariantError: If the variant is unknown.
            SetupError: If the participant configuration is invalid.
            PersistenceError: If the session could not be stored.
        """
        variant = self._registry.get(variant_name)

        # Validate before anything is stored
        state = variant.initialize(participants, rng=self._rng)
        ordered = sorted(participants, key=lambda p: p.slot)

        model = llm_model or self._settings.llm.default_model
        session = await self._store.create_game_session(variant.name, llm_model=model)
        for participant in ordered:
            await self._store.add_game_player(session.id, participant)
        await self._store.update_game_state(
            session.id,
            variant.dump_state(state),
            status=SessionStatus.ACTIVE,
        )

        logger.info(
            "Game session created: session=%s, variant=%s, players=%s",
            session.id,
            variant.name.value,
            [p.participant_id for p in ordered],
        )
        return session.id

    async def load_or_reconstruct(self, session_id: str) -> GameInstance | None:
        """Get a playable instance of a session.

        A cached instance is only reused while the stored session is still
        active and holds the same state. Otherwise it is rebuilt from storage.

        Args:
            session_id: Session to load.

        Returns:
            The instance, or None when the session is missing or not active.
        """
        instance = self._instances.get(session_id)
        if instance is not None:
            session = await self._store.get_game_session(session_id)
            if (
                session is not None
                and session.status == SessionStatus.ACTIVE
                and session.state == instance.variant.dump_state(instance.state)
            ):
                instance.session = session
                return instance

            logger.debug("Cached instance of session %s is stale, reloading", session_id)
            self._evict(session_id)
            if session is None or session.status != SessionStatus.ACTIVE:
                return None

        instance = await self._reconstruct(session_id)
        if instance is None or instance.session.status != SessionStatus.ACTIVE:
            return None

        if self._settings.game.cache_instances:
            self._instances[session_id] = instance
        return instance

    async def end_session(self, session_id: str, outcome: GameOutcome) -> None:
        """Close a session with its final outcome.

        Marks the session completed, records the winner, drops the cached
        instance and updates per-player stats. Calling it for a session
        that is already closed does nothing.

        Args:
            session_id: Session to close.
            outcome: Final outcome. winner_id wins over winner_slot when both
                are given.
        """
        instance = await self.load_or_reconstruct(session_id)
        if instance is None:
            logger.debug("end_session: session %s not active, nothing to do", session_id)
            return

        await self._close(instance, outcome)

    async def _close(self, instance: GameInstance, outcome: GameOutcome) -> None:
        """Persist the terminal state of an active instance."""
        session_id = instance.session_id
        winner_id = outcome.winner_id
        if winner_id is None:
            winner = participant_for_slot(instance.participants, outcome.winner_slot)
            winner_id = winner.participant_id if winner else None

        try:
            await self._store.update_game_state(
                session_id,
                instance.variant.dump_state(instance.state),
                status=SessionStatus.COMPLETED,
            )
            await self._store.record_winner(session_id, winner_id)
        finally:
            self._evict(session_id)

        instance.session.status = SessionStatus.COMPLETED
        instance.session.winner_id = winner_id
        instance.session.ended_at = utc_now()

        logger.info(
            "Game session ended: session=%s, reason=%s, winner=%s, moves=%d, duration=%ss",
            session_id,
            outcome.reason.value,
            winner_id,
            instance.move_count,
            instance.duration_seconds,
        )

        await self._record_results(instance, winner_id)

    async def forfeit_session(
        self,
        session_id: str,
        participant_id: str,
    ) -> GameView | None:
        """Let a participant give up.

        The remaining participant wins. The forfeit is recorded in the move
        log and the session is closed.

        Args:
            session_id: Session to forfeit.
            participant_id: Participant giving up.

        Returns:
            The final view, or None when the session is not available.

        Raises:
            IllegalMoveError: If the participant is not seated in the session.
        """
        instance = await self.load_or_reconstruct(session_id)
        if instance is None:
            return None

        participant = self._require_participant(instance, participant_id)
        left_at = utc_now()
        outcome = instance.variant.forfeit(instance.state, participant, instance.participants)

        try:
            await self._store.mark_player_left(session_id, participant_id, left_at)
            record = await self._store.record_game_move(
                session_id,
                instance.next_move_number,
                participant_id,
                {
                    "action": "forfeit",
                    "token": "forfeit",
                    "payload": {"action": "forfeit"},
                    "description": f"{participant.display_name} forfeited",
                    "source": MoveSource.FORFEIT.value,
                },
                is_ai=participant.is_ai,
            )
        except PersistenceError:
            self._evict(session_id)
            raise

        participant.left_at = left_at
        instance.state = outcome.state
        instance.moves.append(record)

        await self._close(
            instance,
            GameOutcome(reason=EndReason.FORFEIT, winner_slot=outcome.winner_slot),
        )
        return self._build_view(instance)

    async def cancel_session(self, session_id: str) -> bool:
        """Abandon a session without a winner.

        Returns:
            True if the session was cancelled, False if it was missing or
            already closed.
        """
        session = await self._store.get_game_session(session_id)
        if session is None or session.status.is_terminal:
            return False

        try:
            await self._store.update_game_state(
                session_id,
                session.state,
                status=SessionStatus.CANCELLED,
            )
        finally:
            self._evict(session_id)

        logger.info("Game session cancelled: session=%s", session_id)
        return True

    # =========================================================================
    # Moves
    # =========================================================================

    async def submit_move(
        self,
        session_id: str,
        participant_id: str,
        raw_input: Any,
    ) -> MoveResult:
        """Process a human move.

        Decodes the input, applies it, persists the new state and log entry,
        then plays any AI turns that follow before returning.

        Args:
            session_id: Session to play in.
            participant_id: Human making the move.
            raw_input: Raw move from the chat layer.

        Returns:
            MoveResult with every move applied during the call. available is
            False when the session is missing or already over.

        Raises:
            MalformedInputError: If the input cannot be decoded.
            IllegalMoveError: If the move is not allowed.
            PersistenceError: If storage fails.
        """
        logger.info(
            "Processing move: session=%s, participant=%s, input=%r",
            session_id,
            participant_id,
            raw_input,
        )

        instance = await self.load_or_reconstruct(session_id)
        if instance is None:
            logger.info("Move rejected, session not available: %s", session_id)
            return MoveResult(available=False)

        participant = self._require_participant(instance, participant_id)
        if participant.is_ai:
            raise IllegalMoveError(
                "The AI plays its own moves",
                variant=instance.variant.name,
            )

        resolved = self._resolver.resolve_human(instance.variant.name, raw_input)
        result = MoveResult()
        result.turns.append(await self._apply(instance, participant, resolved))

        if not await self._finish_if_ended(instance):
            await self._run_ai_turns(instance, result)

        result.view = self._build_view(instance)
        return result

    async def play_ai_turn(self, session_id: str) -> MoveResult:
        """Play the AI seat when it is the AI's turn.

        Used when the AI moves first and to retry after a failed AI turn.

        Raises:
            IllegalMoveError: If it is not the AI's turn.
            PersistenceError: If storage fails.
        """
        instance = await self.load_or_reconstruct(session_id)
        if instance is None:
            return MoveResult(available=False)

        current = instance.current_participant
        if current is None or not current.is_ai:
            raise IllegalMoveError("It's not the AI's turn", variant=instance.variant.name)

        result = MoveResult()
        await self._run_ai_turns(instance, result)
        result.view = self._build_view(instance)
        return result

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_view(self, session_id: str) -> GameView | None:
        """Get a presentation-ready view of any session, closed ones included.

        Returns:
            The view, or None if the session does not exist.
        """
        instance = await self.load_or_reconstruct(session_id)
        if instance is None:
            instance = await self._reconstruct(session_id)
        if instance is None:
            return None
        return self._build_view(instance)

    async def get_history(self, session_id: str) -> list[MoveRecord]:
        """Get the move log of a session.

        Raises:
            GameNotFoundError: If the session does not exist.
        """
        if await self._store.get_game_session(session_id) is None:
            raise GameNotFoundError(f"Session not found: {session_id}")
        return await self._store.get_game_moves(session_id)

    async def list_active_sessions(self, participant_id: str) -> list[GameSessionRecord]:
        """List active sessions a participant is still seated in."""
        return await self._store.list_active_sessions(participant_id)

    def list_variants(self) -> list[VariantInfo]:
        """Describe every registered variant."""
        return self._registry.get_info()

    # =========================================================================
    # Helper methods
    # =========================================================================

    async def _reconstruct(self, session_id: str) -> GameInstance | None:
        """Rebuild an instance purely from storage."""
        session = await self._store.get_game_session(session_id)
        if session is None:
            return None
        if not session.state:
            logger.warning("Session %s has no stored state", session_id)
            return None

        variant = self._registry.get(session.variant)
        participants = await self._store.get_game_players(session_id)
        moves = await self._store.get_game_moves(session_id)

        logger.debug(
            "Reconstructed session %s: variant=%s, moves=%d",
            session_id,
            variant.name.value,
            len(moves),
        )
        return GameInstance(
            session=session,
            variant=variant,
            state=variant.load_state(session.state),
            participants=participants,
            moves=moves,
        )

    def _evict(self, session_id: str) -> None:
        self._instances.pop(session_id, None)

    def _require_participant(self, instance: GameInstance, participant_id: str) -> Participant:
        participant = instance.participant(participant_id)
        if participant is None:
            raise IllegalMoveError(
                "You are not playing in this game",
                variant=instance.variant.name,
                details={"participant_id": participant_id},
            )
        if participant.has_left:
            raise IllegalMoveError(
                "You already left this game",
                variant=instance.variant.name,
            )
        return participant

    def _get_generator(self, model: str | None) -> TextGenerator:
        if self._generator is not None:
            return self._generator
        if model not in self._generators:
            self._generators[model] = self._generator_factory(model)
        return self._generators[model]

    async def _apply(
        self,
        instance: GameInstance,
        participant: Participant,
        resolved: ResolvedMove,
        ai_reply: str | None = None,
    ) -> TurnSummary:
        """Apply a resolved move, then persist state and log entry.

        The instance is only updated once both writes succeed.
        """
        outcome = instance.variant.apply_move(
            instance.state,
            participant,
            resolved.payload,
            rng=self._rng,
        )

        move_number = instance.next_move_number
        move_data: dict[str, Any] = {
            "token": resolved.token,
            "payload": resolved.payload,
            "description": outcome.description,
            "source": resolved.source.value,
            "events": outcome.events,
        }
        if ai_reply is not None:
            move_data["ai_reply"] = ai_reply

        try:
            await self._store.update_game_state(
                instance.session_id,
                instance.variant.dump_state(outcome.state),
            )
            record = await self._store.record_game_move(
                instance.session_id,
                move_number,
                None if participant.is_ai else participant.participant_id,
                move_data,
                is_ai=participant.is_ai,
            )
        except PersistenceError:
            self._evict(instance.session_id)
            raise

        instance.state = outcome.state
        instance.moves.append(record)

        logger.debug(
            "Move applied: session=%s, move=%d, participant=%s, token=%s, source=%s",
            instance.session_id,
            move_number,
            participant.participant_id,
            resolved.token,
            resolved.source.value,
        )

        return TurnSummary(
            move_number=move_number,
            participant_id=participant.participant_id,
            is_ai=participant.is_ai,
            token=resolved.token,
            description=outcome.description,
            source=resolved.source,
            ai_reply=ai_reply,
            events=outcome.events,
        )

    async def _play_ai_move(self, instance: GameInstance, seat: Participant) -> TurnSummary:
        """Generate, resolve and apply one AI move."""
        legal_moves = instance.variant.legal_moves(instance.state, seat)
        prompt = self._context_builder.build_prompt(
            instance.variant,
            instance.state,
            instance.participants,
            instance.moves,
        )

        llm = self._settings.llm
        generator = self._get_generator(instance.session.llm_model)
        try:
            reply = await generator.generate(
                prompt,
                max_tokens=llm.max_tokens,
                temperature=llm.temperature,
                stop_sequences=llm.stop_sequences,
            )
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(
                message=f"Generation failed: {e}",
                model=instance.session.llm_model,
                original_error=e,
            ) from e

        resolved = self._resolver.resolve_ai(instance.variant.name, reply, legal_moves)
        return await self._apply(instance, seat, resolved, ai_reply=reply)

    async def _run_ai_turns(self, instance: GameInstance, result: MoveResult) -> None:
        """Play the AI seat while it holds the turn.

        Some variants hand the AI several turns in a row (readying up, then
        opening the round). Generation and resolution failures stop the loop
        and are reported in the result; the moves already applied stay.
        """
        for _ in range(self._settings.game.max_ai_turns_per_request):
            seat = instance.current_participant
            if seat is None or not seat.is_ai:
                return

            try:
                turn = await self._play_ai_move(instance, seat)
            except (GenerationError, GameError) as e:
                logger.warning(
                    "AI turn failed: session=%s, error=%s",
                    instance.session_id,
                    e.message,
                )
                result.ai_error = e.message
                return

            result.turns.append(turn)
            if await self._finish_if_ended(instance):
                return

    async def _finish_if_ended(self, instance: GameInstance) -> bool:
        end = instance.variant.check_end(instance.state)
        if not end.ended:
            return False

        await self._close(
            instance,
            GameOutcome(reason=end.reason or EndReason.DRAW, winner_slot=end.winner_slot),
        )
        return True

    async def _record_results(self, instance: GameInstance, winner_id: str | None) -> None:
        """Update per-player stats. Failures are logged, never raised."""
        for participant in instance.participants:
            if participant.is_ai:
                continue
            won = winner_id == participant.participant_id
            lost = winner_id is not None and not won
            try:
                await self._store.record_player_result(
                    participant.participant_id,
                    instance.variant.name,
                    won=won,
                    lost=lost,
                )
            except PersistenceError as e:
                logger.warning(
                    "Failed to record result for %s: %s",
                    participant.participant_id,
                    e,
                )

    def _build_view(self, instance: GameInstance) -> GameView:
        variant = instance.variant
        rendered = variant.render(instance.state, instance.participants)
        end = variant.check_end(instance.state)
        active = instance.session.status == SessionStatus.ACTIVE

        current = instance.current_participant if active and not end.ended else None
        winner = participant_for_slot(instance.participants, end.winner_slot) if end.ended else None

        return GameView(
            session_id=instance.session_id,
            variant=variant.name,
            status=instance.session.status,
            board=rendered.board,
            status_text=rendered.status,
            legal_moves=variant.legal_moves(instance.state, current) if current else [],
            current_participant_id=current.participant_id if current else None,
            awaiting_ai=current is not None and current.is_ai,
            ended=end.ended or instance.session.status.is_terminal,
            winner=winner,
            end_reason=end.reason,
            move_count=instance.move_count,
        )
