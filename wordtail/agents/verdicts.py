from __future__ import annotations

from dataclasses import dataclass

INVALID_TOKEN = "INVALID"
CONCEDE_TOKEN = "I LOSE"


@dataclass(frozen=True, slots=True)
class Invalid:
    """The opponent rejected the human's word (rule violation or reuse)."""


@dataclass(frozen=True, slots=True)
class Concede:
    """The opponent could not find a continuation."""


@dataclass(frozen=True, slots=True)
class Continue:
    word: str


Verdict = Invalid | Concede | Continue


class EmptyReplyError(ValueError):
    pass


def classify_reply(text: str) -> Verdict:
    """Map the opponent's raw reply onto a verdict.

    Sentinels are matched exactly (case-sensitive) after trimming whitespace.
    Anything else is taken verbatim as the opponent's word.
    """

    reply = text.strip()
    if not reply:
        raise EmptyReplyError("Opponent reply is empty")
    if reply == INVALID_TOKEN:
        return Invalid()
    if reply == CONCEDE_TOKEN:
        return Concede()
    return Continue(word=reply)
