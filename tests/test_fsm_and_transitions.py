from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from wordtail.agents.verdicts import Concede, Continue, Invalid
from wordtail.api.models import GameStatus, derive_status
from wordtail.core.history import Actor, Turn
from wordtail.core.transitions import (
    MSG_HUMAN_WINS,
    MSG_SERVICE_FAILURE,
    MSG_START,
    MSG_THINKING,
    MSG_YOUR_TURN,
    ConfigurationFailed,
    OpponentAnswered,
    ServiceFailed,
    SessionStarted,
    StaleResponseError,
    WordSubmitted,
    apply_event,
    rejected_message,
)
from wordtail.fsm import can_send
from wordtail.game_store import new_game_state


@pytest.fixture()
def fresh(session_factory):
    return apply_event(new_game_state(), SessionStarted(session=session_factory(generation=1)))


def _answer(state, reply: str, verdict):
    return OpponentAnswered(generation=state.session.generation, message="msg", reply=reply, verdict=verdict)


@pytest.mark.parametrize(
    ("history_len", "loading", "error", "game_over", "expected"),
    [
        (0, False, False, False, GameStatus.awaiting_first_word),
        (2, False, False, False, GameStatus.awaiting_human_turn),
        (2, True, False, False, GameStatus.opponent_thinking),
        (0, False, True, False, GameStatus.rejected_last_submission),
        (1, False, False, True, GameStatus.game_over_human_wins),
        (0, False, True, True, GameStatus.game_over_error),
    ],
)
def test_derive_status(history_len: int, loading: bool, error: bool, game_over: bool, expected: GameStatus) -> None:
    assert derive_status(history_len=history_len, loading=loading, error=error, game_over=game_over) == expected


def test_session_started_resets_game(fresh) -> None:
    assert fresh.status == GameStatus.awaiting_first_word
    assert fresh.status_message == MSG_START
    assert fresh.generation == 1
    assert fresh.history.turns == []


def test_submit_marks_thinking_without_touching_history(fresh) -> None:
    thinking = apply_event(fresh, WordSubmitted(word="사과", generation=1))

    assert thinking.status == GameStatus.opponent_thinking
    assert thinking.status_message == MSG_THINKING
    assert thinking.history.turns == []
    assert thinking.pending is not None and thinking.pending.word == "사과"
    # Input state is untouched.
    assert fresh.loading is False and fresh.pending is None


def test_continue_commits_both_words_and_records_exchange(fresh) -> None:
    thinking = apply_event(fresh, WordSubmitted(word="사과", generation=1))
    done = apply_event(thinking, _answer(thinking, "과일", Continue(word="과일")))

    assert done.history.snapshot() == (
        Turn(actor=Actor.human, word="사과"),
        Turn(actor=Actor.opponent, word="과일"),
    )
    assert done.status == GameStatus.awaiting_human_turn
    assert done.status_message == MSG_YOUR_TURN
    assert done.loading is False and done.pending is None
    assert [(m.role, m.content) for m in done.session.messages] == [("user", "msg"), ("assistant", "과일")]


def test_invalid_rolls_back_and_sets_error(fresh) -> None:
    thinking = apply_event(fresh, WordSubmitted(word="사과", generation=1))
    done = apply_event(thinking, _answer(thinking, "INVALID", Invalid()))

    assert done.history.snapshot() == fresh.history.snapshot()
    assert done.error is True
    assert done.status == GameStatus.rejected_last_submission
    assert done.status_message == rejected_message("사과")
    assert len(done.session.messages) == 2


def test_concede_commits_human_word_only(fresh) -> None:
    thinking = apply_event(fresh, WordSubmitted(word="자갈", generation=1))
    done = apply_event(thinking, _answer(thinking, "I LOSE", Concede()))

    assert done.history.snapshot() == (Turn(actor=Actor.human, word="자갈"),)
    assert done.game_over is True
    assert done.status == GameStatus.game_over_human_wins
    assert done.status_message == MSG_HUMAN_WINS
    assert not can_send(done, "submit")
    assert can_send(done, "restart")


def test_service_failure_rolls_back_without_recording_exchange(fresh) -> None:
    thinking = apply_event(fresh, WordSubmitted(word="사과", generation=1))
    done = apply_event(thinking, ServiceFailed(generation=1, error="boom"))

    assert done.history.snapshot() == fresh.history.snapshot()
    assert done.error is True
    assert done.loading is False
    assert done.status_message == MSG_SERVICE_FAILURE
    assert done.session.messages == []


def test_submit_not_allowed_while_thinking(fresh) -> None:
    thinking = apply_event(fresh, WordSubmitted(word="사과", generation=1))
    assert not can_send(thinking, "submit")
    with pytest.raises(TransitionNotAllowed):
        apply_event(thinking, WordSubmitted(word="사자", generation=1))


def test_restart_only_after_game_over(fresh, session_factory) -> None:
    assert not can_send(fresh, "restart")
    with pytest.raises(TransitionNotAllowed):
        apply_event(fresh, SessionStarted(session=session_factory(generation=2), restart=True))


def test_reply_for_superseded_session_is_stale(fresh, session_factory) -> None:
    thinking = apply_event(fresh, WordSubmitted(word="사과", generation=1))
    switched = apply_event(thinking, SessionStarted(session=session_factory(generation=2)))

    with pytest.raises(StaleResponseError):
        apply_event(switched, OpponentAnswered(generation=1, message="m", reply="과일", verdict=Continue(word="과일")))
    with pytest.raises(StaleResponseError):
        apply_event(switched, ServiceFailed(generation=1, error="late"))


def test_configuration_failure_is_game_over_error(fresh) -> None:
    failed = apply_event(fresh, ConfigurationFailed(message=""))

    assert failed.status == GameStatus.game_over_error
    assert failed.session is None
    assert failed.generation == fresh.generation + 1
    assert failed.status_message
    assert not can_send(failed, "submit")
    assert can_send(failed, "restart")


def test_reply_for_replaced_submission_is_stale(fresh) -> None:
    first = apply_event(fresh, WordSubmitted(word="사과", generation=1))
    lost = first.pending.submission_id
    expired = apply_event(first, ServiceFailed(generation=1, error="expired", submission_id=lost))
    second = apply_event(expired, WordSubmitted(word="사과", generation=1))

    with pytest.raises(StaleResponseError):
        apply_event(
            second,
            OpponentAnswered(generation=1, message="m", reply="과일", verdict=Continue(word="과일"), submission_id=lost),
        )
    matching = OpponentAnswered(
        generation=1,
        message="m",
        reply="과일",
        verdict=Continue(word="과일"),
        submission_id=second.pending.submission_id,
    )
    assert apply_event(second, matching).current_word() == "과일"
