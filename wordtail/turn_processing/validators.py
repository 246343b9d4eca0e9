from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from wordtail.api.models import GameState
from wordtail.fsm import can_send


class PreconditionError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    game_id: str
    word: str


class SubmissionValidator(ABC):
    """A small, composable check on an incoming word."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, state: GameState) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class NonEmptyWordValidator(SubmissionValidator):
    def validate(self, *, ctx: ValidationContext, state: GameState) -> None:
        if not ctx.word.strip():
            raise PreconditionError("Word is empty")


@dataclass(frozen=True, slots=True)
class ActiveSessionValidator(SubmissionValidator):
    def validate(self, *, ctx: ValidationContext, state: GameState) -> None:
        if state.session is None:
            raise PreconditionError("No active opponent session")


@dataclass(frozen=True, slots=True)
class StatusValidator(SubmissionValidator):
    """Refuse submissions while the opponent is thinking or after the game ended."""

    def validate(self, *, ctx: ValidationContext, state: GameState) -> None:
        if not can_send(state, "submit"):
            raise PreconditionError(f"Submissions not accepted in status '{state.status.value}'")


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[SubmissionValidator, ...]

    def validate(self, *, ctx: ValidationContext, state: GameState) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, state=state)


SUBMIT_PIPELINE = ValidatorPipeline(
    validators=(
        NonEmptyWordValidator(),
        ActiveSessionValidator(),
        StatusValidator(),
    )
)
