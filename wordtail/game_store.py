from __future__ import annotations

import os
from datetime import UTC, datetime
from uuid import UUID, uuid4

import redis

from wordtail.api.models import Difficulty, GameState

GAME_KEY_PREFIX = "wordtail:game:"  # + {uuid}
DEFAULT_GAME_TTL_SECONDS = 86_400
DEFAULT_PENDING_TIMEOUT_SECONDS = 120


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _game_key(game_id: UUID) -> str:
    return f"{GAME_KEY_PREFIX}{game_id}"


def game_ttl_seconds() -> int:
    # Live games only; nothing outlives this TTL.
    return int(os.environ.get("WORDTAIL_GAME_TTL_SECONDS", str(DEFAULT_GAME_TTL_SECONDS)))


def pending_timeout_seconds() -> float:
    # A submission still pending after this long lost its opponent call (crash, restart).
    return float(os.environ.get("WORDTAIL_PENDING_TIMEOUT_SECONDS", str(DEFAULT_PENDING_TIMEOUT_SECONDS)))


def new_game_state(*, difficulty: Difficulty = Difficulty.normal) -> GameState:
    now = _now()
    return GameState(game_id=uuid4(), created_at=now, last_updated_at=now, difficulty=difficulty)


def save_game(*, r: redis.Redis, state: GameState) -> None:
    state.last_updated_at = _now()
    r.set(_game_key(state.game_id), state.model_dump_json(), ex=game_ttl_seconds())


def get_game(*, r: redis.Redis, game_id: UUID) -> GameState | None:
    raw = r.get(_game_key(game_id))
    if not raw:
        return None
    return GameState.model_validate_json(raw)


class GameNotFoundError(ValueError):
    pass


def require_game(*, r: redis.Redis, game_id: UUID) -> GameState:
    state = get_game(r=r, game_id=game_id)
    if state is None:
        raise GameNotFoundError("Game not found")
    return state
