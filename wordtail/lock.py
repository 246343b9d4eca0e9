from __future__ import annotations

import time
from contextlib import contextmanager

import redis


class GameBusyError(ValueError):
    pass


@contextmanager
def game_lock(*, r: redis.Redis, game_id: str, ttl_ms: int = 5_000):
    """Best-effort per-game lock.

    Held only around read-modify-write of the stored game, never across an
    opponent call. Fails fast; callers that can wait retry asynchronously.
    For production you'd want unique lock tokens and a safe release via Lua.
    """

    key = f"lock:game:{game_id}"
    acquired = r.set(key, "1", nx=True, px=ttl_ms)
    if not acquired:
        raise GameBusyError("Game is busy")
    try:
        yield
    finally:
        # Only safe in our single-holder scenario.
        r.delete(key)
        # small yield to avoid tight contention in tests
        time.sleep(0)
