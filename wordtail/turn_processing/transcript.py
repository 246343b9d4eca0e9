from __future__ import annotations

from collections.abc import Sequence

from wordtail.core.history import Actor, Turn

HISTORY_HEADER = "이전 단어들:"


def render_transcript(*, history: Sequence[Turn], word: str) -> str:
    """Render the message sent to the opponent for one submission.

    `history` is the pre-submission log; the new word goes on the last line.
    The opponent keeps its own memory too, the transcript only reinforces it.
    An empty history still leaves its (blank) line under the header.
    """

    history_text = "\n".join(f"{t.actor.label}: {t.word}" for t in history)
    return f"{HISTORY_HEADER}\n{history_text}\n\n{Actor.human.label}: {word}"
