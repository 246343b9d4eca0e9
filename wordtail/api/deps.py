from __future__ import annotations

import os
from collections.abc import Generator

import redis
from fastapi import Depends

from wordtail.agents.base import Oracle
from wordtail.agents.factory import create_default_oracle
from wordtail.api.models import GameState, GameView
from wordtail.turn_processing.engine import TurnEngine
from wordtail.websocket_hub import hub


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def create_redis() -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(get_redis_url(), decode_responses=True)


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis()
    try:
        yield client
    finally:
        client.close()


def get_oracle() -> Oracle:
    return create_default_oracle()


async def broadcast_game_updated(state: GameState) -> None:
    view = GameView.from_state(state)
    await hub.broadcast(
        str(state.game_id),
        {"type": "game_updated", "game_id": str(state.game_id), "status": view.status.value},
    )


def get_engine(r: redis.Redis = Depends(get_redis), oracle: Oracle = Depends(get_oracle)) -> TurnEngine:
    return TurnEngine(r=r, oracle=oracle, notify=broadcast_game_updated)
