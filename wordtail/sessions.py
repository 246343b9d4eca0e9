from __future__ import annotations

import logging
from datetime import UTC, datetime

from wordtail.agents.autogen_config import require_settings
from wordtail.api.models import Difficulty, OracleSession
from wordtail.instructions import build_instructions

logger = logging.getLogger(__name__)


def start_session(*, difficulty: Difficulty | str, generation: int) -> OracleSession:
    """Open a fresh opponent conversation for `difficulty`.

    Raises ConfigurationError when no oracle credential is configured. The
    session replaces whatever session the game had before; resetting the game
    itself is the SessionStarted transition.
    """

    level = Difficulty(difficulty)
    settings = require_settings()
    session = OracleSession(
        generation=generation,
        difficulty=level,
        instructions=build_instructions(level),
        model=settings.model,
        created_at=datetime.now(tz=UTC),
    )
    logger.info("Started opponent session generation=%s difficulty=%s model=%s", generation, level.value, settings.model)
    return session
