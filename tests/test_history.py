from __future__ import annotations

import pytest
from pydantic import ValidationError

from wordtail.core.history import Actor, GameHistory, HistoryError, Turn


def _h(word: str) -> Turn:
    return Turn(actor=Actor.human, word=word)


def _o(word: str) -> Turn:
    return Turn(actor=Actor.opponent, word=word)


def test_empty_history_has_no_current_word_or_start_char() -> None:
    h = GameHistory()
    assert h.current_word() == ""
    assert h.required_start_char() == ""


def test_current_word_and_start_char_follow_last_turn() -> None:
    h = GameHistory()
    h.append(_h("사과"))
    assert h.current_word() == "사과"
    assert h.required_start_char() == "과"

    h.append(_o("과일"))
    assert h.current_word() == "과일"
    assert h.required_start_char() == "일"


def test_append_enforces_alternation_starting_with_human() -> None:
    h = GameHistory()
    with pytest.raises(HistoryError):
        h.append(_o("과일"))

    h.append(_h("사과"))
    with pytest.raises(HistoryError):
        h.append(_h("과자"))
    assert h.snapshot() == (_h("사과"),)


def test_rollback_restores_exact_snapshot() -> None:
    h = GameHistory()
    h.append(_h("사과"))
    h.append(_o("과일"))
    snap = h.snapshot()

    h.append(_h("일기"))
    h.rollback_to(snap)

    assert h.snapshot() == snap
    assert h.model_dump() == GameHistory(turns=list(snap)).model_dump()


def test_rollback_rejects_snapshot_never_observed() -> None:
    h = GameHistory()
    h.append(_h("사과"))

    with pytest.raises(HistoryError):
        h.rollback_to((_h("바나나"),))
    with pytest.raises(HistoryError):
        h.rollback_to((_h("사과"), _o("과일")))


def test_turns_are_immutable_and_non_empty() -> None:
    t = _h("사과")
    with pytest.raises(ValidationError):
        t.word = "배"  # type: ignore[misc]
    with pytest.raises(ValidationError):
        Turn(actor=Actor.human, word="")


def test_history_round_trips_through_json() -> None:
    h = GameHistory()
    h.append(_h("사과"))
    h.append(_o("과일"))

    restored = GameHistory.model_validate_json(h.model_dump_json())
    assert restored.snapshot() == h.snapshot()
