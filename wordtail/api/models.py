from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from wordtail.core.history import GameHistory, Turn


class Difficulty(StrEnum):
    easy = "easy"
    normal = "normal"
    hard = "hard"
    expert = "expert"

    @property
    def label(self) -> str:
        return DIFFICULTY_LABELS[self]


DIFFICULTY_LABELS: dict[Difficulty, str] = {
    Difficulty.easy: "쉬움",
    Difficulty.normal: "보통",
    Difficulty.hard: "어려움",
    Difficulty.expert: "최고난도",
}


class GameStatus(StrEnum):
    awaiting_first_word = "awaiting_first_word"
    awaiting_human_turn = "awaiting_human_turn"
    opponent_thinking = "opponent_thinking"
    rejected_last_submission = "rejected_last_submission"
    game_over_human_wins = "game_over_human_wins"
    game_over_error = "game_over_error"


def derive_status(*, history_len: int, loading: bool, error: bool, game_over: bool) -> GameStatus:
    if game_over:
        return GameStatus.game_over_error if error else GameStatus.game_over_human_wins
    if loading:
        return GameStatus.opponent_thinking
    if error:
        return GameStatus.rejected_last_submission
    if history_len == 0:
        return GameStatus.awaiting_first_word
    return GameStatus.awaiting_human_turn


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str

    def as_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class OracleSession(BaseModel):
    """One instruction-scoped conversation with the opponent.

    `messages` is the opponent's own conversation memory. It is never shown to
    the player.
    """

    generation: int
    difficulty: Difficulty
    instructions: str
    model: str
    created_at: datetime
    messages: list[ChatMessage] = Field(default_factory=list)


class PendingSubmission(BaseModel):
    submission_id: UUID = Field(default_factory=uuid4)
    word: str
    generation: int
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    # Exact pre-submission history; rejected or failed turns restore it.
    snapshot: list[Turn] = Field(default_factory=list)


class GameState(BaseModel):
    game_id: UUID
    created_at: datetime
    last_updated_at: datetime

    difficulty: Difficulty = Difficulty.normal

    # Bumped on every session (re)creation; in-flight replies carry the value they started with.
    generation: int = 0
    session: OracleSession | None = None

    history: GameHistory = Field(default_factory=GameHistory)
    pending: PendingSubmission | None = None

    loading: bool = False
    error: bool = False
    game_over: bool = False
    status_message: str = ""

    @property
    def status(self) -> GameStatus:
        return derive_status(
            history_len=len(self.history.turns),
            loading=self.loading,
            error=self.error,
            game_over=self.game_over,
        )

    def current_word(self) -> str:
        return self.history.current_word()

    def required_start_char(self) -> str:
        return self.history.required_start_char()


class GameView(BaseModel):
    """Read-only projection consumed by the presentation layer."""

    game_id: UUID
    difficulty: Difficulty
    history: list[Turn]
    current_word: str
    required_start_char: str
    status: GameStatus
    status_message: str
    loading: bool
    error: bool
    game_over: bool
    session_generation: int | None = None

    @classmethod
    def from_state(cls, state: GameState) -> "GameView":
        return cls(
            game_id=state.game_id,
            difficulty=state.difficulty,
            history=list(state.history.turns),
            current_word=state.current_word(),
            required_start_char=state.required_start_char(),
            status=state.status,
            status_message=state.status_message,
            loading=state.loading,
            error=state.error,
            game_over=state.game_over,
            session_generation=state.session.generation if state.session is not None else None,
        )


class GameCreateRequest(BaseModel):
    difficulty: Difficulty = Difficulty.normal


class SubmitWordRequest(BaseModel):
    # Blank words are accepted here and ignored by the engine.
    word: str = Field(..., max_length=100)


class DifficultyRequest(BaseModel):
    difficulty: Difficulty


class DifficultyOption(BaseModel):
    value: Difficulty
    label: str


class DifficultyListResponse(BaseModel):
    difficulties: list[DifficultyOption]
