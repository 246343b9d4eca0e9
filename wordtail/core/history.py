from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class HistoryError(ValueError):
    pass


class Actor(StrEnum):
    human = "human"
    opponent = "opponent"

    @property
    def label(self) -> str:
        """Speaker label used in the transcript sent to the opponent."""

        return "사용자" if self is Actor.human else "AI"


class Turn(BaseModel):
    model_config = ConfigDict(frozen=True)

    actor: Actor
    word: str = Field(..., min_length=1)


class GameHistory(BaseModel):
    """Chronological word log of one game.

    Grows only on confirmed turns and alternates human, opponent, human, ...
    `rollback_to` is the only operation that removes entries.
    """

    turns: list[Turn] = Field(default_factory=list)

    def expected_actor(self) -> Actor:
        return Actor.human if len(self.turns) % 2 == 0 else Actor.opponent

    def append(self, turn: Turn) -> None:
        expected = self.expected_actor()
        if turn.actor != expected:
            raise HistoryError(f"Expected a {expected.value} turn, got {turn.actor.value}")
        self.turns.append(turn)

    def snapshot(self) -> tuple[Turn, ...]:
        return tuple(self.turns)

    def rollback_to(self, snapshot: Sequence[Turn]) -> None:
        """Restore an exact, previously observed state of the log."""

        snap = tuple(snapshot)
        if len(snap) > len(self.turns) or tuple(self.turns[: len(snap)]) != snap:
            raise HistoryError("Snapshot does not match this history")
        self.turns = list(snap)

    def current_word(self) -> str:
        return self.turns[-1].word if self.turns else ""

    def required_start_char(self) -> str:
        word = self.current_word()
        return word[-1] if word else ""
