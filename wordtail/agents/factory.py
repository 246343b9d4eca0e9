from __future__ import annotations

from typing import cast

from wordtail.agents.ag2_backend import Ag2Oracle
from wordtail.agents.autogen_config import settings_from_env
from wordtail.agents.base import Oracle


def create_default_oracle(*, name: str = "wordtail_opponent") -> Oracle:
    """Create the default LLM-backed opponent.

    Currently uses AG2/autogen and reads model configuration from env.
    """

    return cast(Oracle, Ag2Oracle(name=name, model=settings_from_env().model))
