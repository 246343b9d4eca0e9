from __future__ import annotations

from dataclasses import dataclass

from wordtail.api.models import Difficulty
from wordtail.prompts import load_prompt

BASE_RULES_FILE = "base_rules.txt"


@dataclass(frozen=True, slots=True)
class DifficultySpec:
    level: Difficulty
    prompt_file: str


DIFFICULTY_SPECS: dict[Difficulty, DifficultySpec] = {
    Difficulty.easy: DifficultySpec(Difficulty.easy, "difficulty/easy.txt"),
    Difficulty.normal: DifficultySpec(Difficulty.normal, "difficulty/normal.txt"),
    Difficulty.hard: DifficultySpec(Difficulty.hard, "difficulty/hard.txt"),
    Difficulty.expert: DifficultySpec(Difficulty.expert, "difficulty/expert.txt"),
}


def load_difficulty_prompt(level: Difficulty | str) -> str:
    level_name = Difficulty(level) if not isinstance(level, Difficulty) else level
    spec = DIFFICULTY_SPECS[level_name]
    return load_prompt(spec.prompt_file)


def build_instructions(level: Difficulty | str) -> str:
    """Opponent behavior contract for a difficulty level.

    The six base rules are always present; the level's clauses follow them.
    """

    return load_prompt(BASE_RULES_FILE) + load_difficulty_prompt(level)
