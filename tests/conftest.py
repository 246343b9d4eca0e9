from __future__ import annotations

import os
from collections.abc import Generator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import fakeredis
import pytest

from wordtail.agents.base import OracleReply
from wordtail.api.models import Difficulty, OracleSession


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    In CI we don't auto-load `.env`, so a developer's real endpoint never leaks
    into the suite. Opt-in locally with WORDTAIL_LOAD_DOTENV_FOR_TESTS=1.
    """

    if os.environ.get("CI") and os.environ.get("WORDTAIL_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@pytest.fixture(autouse=True)
def _oracle_credential(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("OPENAI_MODEL", "test-model")


@dataclass
class ScriptedOracle:
    """Fake opponent: returns queued replies in order, or raises queued exceptions."""

    replies: list[str | Exception] = field(default_factory=list)
    calls: list[tuple[OracleSession, str]] = field(default_factory=list)

    def queue(self, *replies: str | Exception) -> "ScriptedOracle":
        self.replies.extend(replies)
        return self

    async def send(self, *, session: OracleSession, message: str) -> OracleReply:
        self.calls.append((session, message))
        if not self.replies:
            raise AssertionError("Unexpected opponent call")
        nxt = self.replies.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return OracleReply(text=nxt)


def make_session(*, generation: int = 1, difficulty: Difficulty = Difficulty.normal) -> OracleSession:
    return OracleSession(
        generation=generation,
        difficulty=difficulty,
        instructions="rules",
        model="test-model",
        created_at=datetime.now(tz=UTC),
    )


@pytest.fixture()
def session_factory():
    return make_session


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def oracle() -> ScriptedOracle:
    return ScriptedOracle()


@pytest.fixture()
def client_and_oracle(r: fakeredis.FakeRedis, oracle: ScriptedOracle):
    """FastAPI TestClient wired to fakeredis and the scripted opponent."""

    from fastapi.testclient import TestClient

    from wordtail.api.deps import get_oracle, get_redis
    from wordtail.main import app

    def _override_redis() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override_redis
    app.dependency_overrides[get_oracle] = lambda: oracle
    with TestClient(app) as c:
        yield c, oracle
    app.dependency_overrides.clear()
