from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from wordtail.api.models import OracleSession


class OracleError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class OracleReply:
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


class Oracle(Protocol):
    """The opponent: decides words and judges the human's words."""

    async def send(self, *, session: OracleSession, message: str) -> OracleReply:  # pragma: no cover
        ...
