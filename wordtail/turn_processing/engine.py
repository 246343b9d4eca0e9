from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

import redis
from statemachine.exceptions import TransitionNotAllowed

from wordtail.agents.autogen_config import ConfigurationError
from wordtail.agents.base import Oracle
from wordtail.agents.verdicts import classify_reply
from wordtail.api.models import Difficulty, GameState, OracleSession, PendingSubmission
from wordtail.core.transitions import (
    ConfigurationFailed,
    OpponentAnswered,
    Resolution,
    ServiceFailed,
    SessionStarted,
    StaleResponseError,
    WordSubmitted,
    apply_event,
)
from wordtail.fsm import can_send
from wordtail.game_store import new_game_state, pending_timeout_seconds, require_game, save_game
from wordtail.lock import GameBusyError, game_lock
from wordtail.sessions import start_session
from wordtail.turn_processing.transcript import render_transcript
from wordtail.turn_processing.validators import SUBMIT_PIPELINE, PreconditionError, ValidationContext

logger = logging.getLogger(__name__)

Notify = Callable[[GameState], Awaitable[None]]

# The resolution phase must not lose a reply to brief contention.
RESOLVE_LOCK_WAIT_SECONDS = 2.0
RESOLVE_RETRY_DELAY_SECONDS = 0.01


@dataclass(slots=True)
class TurnEngine:
    """Drives one game through the turn protocol.

    A submission is handled in two locked phases around the opponent call:
    the word is accepted and the game marked as thinking, then the reply (or
    failure) is applied to whatever the stored game looks like by then. The
    lock is never held while waiting for the opponent.
    """

    r: redis.Redis
    oracle: Oracle
    notify: Notify | None = None

    async def _notify(self, state: GameState) -> None:
        if self.notify is not None:
            await self.notify(state)

    def get(self, *, game_id: UUID) -> GameState:
        return require_game(r=self.r, game_id=game_id)

    async def create_game(self, *, difficulty: Difficulty = Difficulty.normal) -> GameState:
        """Create a game with a fresh session. ConfigurationError propagates."""

        state = new_game_state(difficulty=difficulty)
        session = start_session(difficulty=difficulty, generation=state.generation + 1)
        state = apply_event(state, SessionStarted(session=session))
        save_game(r=self.r, state=state)
        logger.info("Created game %s difficulty=%s", state.game_id, difficulty.value)
        await self._notify(state)
        return state

    async def select_difficulty(self, *, game_id: UUID, difficulty: Difficulty) -> GameState:
        """Replace the session; any reply still in flight is discarded when it lands."""

        with game_lock(r=self.r, game_id=str(game_id)):
            state = require_game(r=self.r, game_id=game_id)
            if state.loading:
                logger.info("Game %s: difficulty changed while the opponent was thinking", game_id)
            state = self._start_session(state=state, difficulty=difficulty, restart=False)
            save_game(r=self.r, state=state)

        await self._notify(state)
        return state

    async def restart(self, *, game_id: UUID) -> GameState:
        """Start over with the same difficulty. Only allowed once the game is over."""

        with game_lock(r=self.r, game_id=str(game_id)):
            state = require_game(r=self.r, game_id=game_id)
            if not can_send(state, "restart"):
                logger.debug("Game %s: ignoring restart in status %s", game_id, state.status.value)
                return state
            state = self._start_session(state=state, difficulty=state.difficulty, restart=True)
            save_game(r=self.r, state=state)

        await self._notify(state)
        return state

    def _start_session(self, *, state: GameState, difficulty: Difficulty, restart: bool) -> GameState:
        try:
            session = start_session(difficulty=difficulty, generation=state.generation + 1)
        except ConfigurationError as e:
            logger.error("Game %s: cannot start opponent session: %s", state.game_id, e)
            return apply_event(state, ConfigurationFailed(message="", difficulty=difficulty))
        return apply_event(state, SessionStarted(session=session, restart=restart))

    async def submit(self, *, game_id: UUID, word: str) -> GameState:
        """Play the human's word and wait for the opponent.

        Precondition failures (blank word, no session, opponent already
        thinking, game over, another request holding the game) leave the game
        untouched and make no opponent call. Once accepted, the submission is
        always resolved: if anything goes wrong afterwards, `loading` is cleared
        and the pre-submission history restored.
        """

        candidate = word.strip()
        try:
            state, accepted = self._accept(game_id=game_id, word=candidate)
        except GameBusyError:
            logger.debug("Game %s: ignoring submission %r while the game is busy", game_id, candidate)
            return self.get(game_id=game_id)
        if not accepted:
            return state

        pending, session = state.pending, state.session
        if pending is None or session is None:
            raise StaleResponseError(f"Game {game_id}: submission was not recorded")

        logger.info("Game %s: human played %r (generation %s)", game_id, candidate, pending.generation)
        resolved: GameState | None = None
        try:
            await self._notify(state)
            event = await self._ask_opponent(session=session, pending=pending)
            resolved = await self._resolve(game_id=game_id, event=event)
        except Exception:
            logger.exception("Game %s: could not resolve submission %s", game_id, pending.submission_id)
        finally:
            if resolved is None:
                resolved = self._abandon(game_id=game_id, pending=pending)

        await self._notify(resolved)
        return resolved

    def _accept(self, *, game_id: UUID, word: str) -> tuple[GameState, bool]:
        with game_lock(r=self.r, game_id=str(game_id)):
            state = self._expire_pending(require_game(r=self.r, game_id=game_id))
            try:
                SUBMIT_PIPELINE.validate(ctx=ValidationContext(game_id=str(game_id), word=word), state=state)
            except PreconditionError as e:
                logger.debug("Game %s: ignoring submission %r: %s", game_id, word, e)
                return state, False

            state = apply_event(state, WordSubmitted(word=word, generation=state.generation))
            save_game(r=self.r, state=state)
        return state, True

    def _expire_pending(self, state: GameState) -> GameState:
        """Fail a submission whose opponent call was lost (e.g. the process died mid-call)."""

        pending = state.pending
        if pending is None:
            return state
        age = (datetime.now(tz=UTC) - pending.submitted_at).total_seconds()
        if age < pending_timeout_seconds():
            return state

        logger.warning("Game %s: submission %r pending for %.0fs; failing it", state.game_id, pending.word, age)
        expired = apply_event(
            state,
            ServiceFailed(generation=pending.generation, error="expired", submission_id=pending.submission_id),
        )
        save_game(r=self.r, state=expired)
        return expired

    async def _ask_opponent(self, *, session: OracleSession, pending: PendingSubmission) -> Resolution:
        try:
            message = render_transcript(history=pending.snapshot, word=pending.word)
            reply = await self.oracle.send(session=session, message=message)
            verdict = classify_reply(reply.text)
        except Exception as e:
            # Transport, service and malformed-reply failures all mean "try again".
            logger.exception("Opponent call failed for generation %s", pending.generation)
            return ServiceFailed(
                generation=pending.generation,
                error=str(e) or type(e).__name__,
                submission_id=pending.submission_id,
            )

        logger.info("Opponent answered %r (%s)", reply.text.strip(), type(verdict).__name__)
        return OpponentAnswered(
            generation=pending.generation,
            message=message,
            reply=reply.text.strip(),
            verdict=verdict,
            submission_id=pending.submission_id,
        )

    async def _resolve(self, *, game_id: UUID, event: Resolution) -> GameState:
        # The lock fails fast; retry here without blocking the event loop.
        deadline = time.monotonic() + RESOLVE_LOCK_WAIT_SECONDS
        while True:
            try:
                with game_lock(r=self.r, game_id=str(game_id)):
                    return self._apply_resolution(game_id=game_id, event=event)
            except GameBusyError:
                if time.monotonic() >= deadline:
                    raise
            await asyncio.sleep(RESOLVE_RETRY_DELAY_SECONDS)

    def _apply_resolution(self, *, game_id: UUID, event: Resolution) -> GameState:
        state = require_game(r=self.r, game_id=game_id)
        try:
            resolved = apply_event(state, event)
        except StaleResponseError as e:
            logger.info("Game %s: discarding stale opponent reply: %s", game_id, e)
            return state
        except (TransitionNotAllowed, TypeError, ValueError):
            logger.exception("Game %s: could not apply %s; rolling back", game_id, type(event).__name__)
            resolved = apply_event(
                state,
                ServiceFailed(generation=event.generation, error="resolution failed", submission_id=event.submission_id),
            )
        save_game(r=self.r, state=resolved)
        return resolved

    def _abandon(self, *, game_id: UUID, pending: PendingSubmission) -> GameState:
        """Fail `pending` without the lock when its normal resolution did not complete.

        Raises only if the store itself is unreachable; the pending timeout
        clears the game on the next submission in that case.
        """

        state = require_game(r=self.r, game_id=game_id)
        try:
            failed = apply_event(
                state,
                ServiceFailed(generation=pending.generation, error="abandoned", submission_id=pending.submission_id),
            )
        except StaleResponseError:
            # Already resolved (or superseded) before the failure.
            return state
        save_game(r=self.r, state=failed)
        logger.warning("Game %s: abandoned submission %r; history rolled back", game_id, pending.word)
        return failed
