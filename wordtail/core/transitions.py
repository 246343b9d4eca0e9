from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from wordtail.agents.verdicts import Concede, Continue, Invalid, Verdict
from wordtail.api.models import ChatMessage, Difficulty, GameState, OracleSession, PendingSubmission
from wordtail.core.history import Actor, Turn
from wordtail.fsm import next_status

MSG_START = "게임을 시작하려면 첫 단어를 입력하세요."
MSG_THINKING = "AI가 생각 중입니다..."
MSG_YOUR_TURN = "당신의 차례입니다."
MSG_HUMAN_WINS = "당신이 이겼습니다! AI가 단어를 찾지 못했습니다."
MSG_SERVICE_FAILURE = "오류가 발생했습니다. 다시 시도해주세요."
MSG_CONFIGURATION_FAILURE = "AI 상대를 준비하지 못했습니다. 설정을 확인한 뒤 다시 시작하세요."


def rejected_message(word: str) -> str:
    return f"'{word}'는 규칙에 맞지 않는 단어입니다. 다시 시도하세요."


class StaleResponseError(RuntimeError):
    """A reply arrived for a submission that is no longer pending."""


@dataclass(frozen=True, slots=True)
class SessionStarted:
    session: OracleSession
    restart: bool = False

    @property
    def event_id(self) -> str:
        return "restart" if self.restart else "select_difficulty"


@dataclass(frozen=True, slots=True)
class ConfigurationFailed:
    message: str
    difficulty: Difficulty | None = None

    event_id = "configuration_failed"


@dataclass(frozen=True, slots=True)
class WordSubmitted:
    word: str
    generation: int

    event_id = "submit"


@dataclass(frozen=True, slots=True)
class OpponentAnswered:
    generation: int
    message: str
    reply: str
    verdict: Verdict
    submission_id: UUID | None = None

    @property
    def event_id(self) -> str:
        if isinstance(self.verdict, Invalid):
            return "move_rejected"
        if isinstance(self.verdict, Concede):
            return "opponent_conceded"
        return "opponent_continued"


@dataclass(frozen=True, slots=True)
class ServiceFailed:
    generation: int
    error: str
    submission_id: UUID | None = None

    event_id = "service_failed"


TurnEvent = SessionStarted | ConfigurationFailed | WordSubmitted | OpponentAnswered | ServiceFailed
Resolution = OpponentAnswered | ServiceFailed


def _require_pending(state: GameState, event: Resolution) -> tuple[PendingSubmission, OracleSession]:
    pending = state.pending
    session = state.session
    if pending is None or session is None:
        raise StaleResponseError("No submission is pending")
    if pending.generation != event.generation or session.generation != event.generation:
        raise StaleResponseError(
            f"Reply for generation {event.generation} but active generation is {session.generation}"
        )
    if event.submission_id is not None and event.submission_id != pending.submission_id:
        raise StaleResponseError(f"Reply for submission {event.submission_id} which is no longer pending")
    return pending, session


def apply_event(state: GameState, event: TurnEvent) -> GameState:
    """Pure transition: return the state that results from `event`.

    The input state is never mutated. Illegal transitions raise
    `statemachine.exceptions.TransitionNotAllowed`; replies for a superseded
    session raise `StaleResponseError`.
    """

    if isinstance(event, (OpponentAnswered, ServiceFailed)):
        _require_pending(state, event)

    next_status(state, event.event_id)
    nxt = state.model_copy(deep=True)
    nxt.last_updated_at = datetime.now(tz=UTC)

    if isinstance(event, SessionStarted):
        nxt.session = event.session
        nxt.generation = event.session.generation
        nxt.difficulty = event.session.difficulty
        nxt.history.turns = []
        nxt.pending = None
        nxt.loading = False
        nxt.error = False
        nxt.game_over = False
        nxt.status_message = MSG_START
        return nxt

    if isinstance(event, ConfigurationFailed):
        nxt.session = None
        nxt.generation = state.generation + 1
        if event.difficulty is not None:
            nxt.difficulty = event.difficulty
        nxt.history.turns = []
        nxt.pending = None
        nxt.loading = False
        nxt.error = True
        nxt.game_over = True
        nxt.status_message = event.message or MSG_CONFIGURATION_FAILURE
        return nxt

    if isinstance(event, WordSubmitted):
        nxt.pending = PendingSubmission(
            word=event.word,
            generation=event.generation,
            snapshot=list(state.history.snapshot()),
        )
        nxt.loading = True
        nxt.error = False
        nxt.status_message = MSG_THINKING
        return nxt

    pending, session = _require_pending(nxt, event)
    nxt.pending = None
    nxt.loading = False

    if isinstance(event, ServiceFailed):
        nxt.history.rollback_to(pending.snapshot)
        nxt.error = True
        nxt.status_message = MSG_SERVICE_FAILURE
        return nxt

    # The opponent answered; its conversation memory keeps the exchange whatever the verdict.
    session.messages.append(ChatMessage(role="user", content=event.message))
    session.messages.append(ChatMessage(role="assistant", content=event.reply))

    verdict = event.verdict
    if isinstance(verdict, Invalid):
        nxt.history.rollback_to(pending.snapshot)
        nxt.error = True
        nxt.status_message = rejected_message(pending.word)
        return nxt

    nxt.history.rollback_to(pending.snapshot)
    nxt.history.append(Turn(actor=Actor.human, word=pending.word))

    if isinstance(verdict, Concede):
        nxt.game_over = True
        nxt.status_message = MSG_HUMAN_WINS
        return nxt

    if isinstance(verdict, Continue):
        nxt.history.append(Turn(actor=Actor.opponent, word=verdict.word))
        nxt.status_message = MSG_YOUR_TURN
        return nxt

    raise TypeError(f"Unknown verdict {verdict!r}")
