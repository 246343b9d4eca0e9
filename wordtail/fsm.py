from __future__ import annotations

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from wordtail.api.models import GameState, GameStatus


class TurnFSM(StateMachine):
    """FSM guard over the derived GameStatus.

    The status itself is never stored: it is derived from the game flags, so
    each check builds a machine at the current status and tries the event.
    Mutations are applied by `wordtail.core.transitions.apply_event`.
    """

    awaiting_first_word = State(
        GameStatus.awaiting_first_word.value,
        value=GameStatus.awaiting_first_word.value,
        initial=True,
    )
    awaiting_human_turn = State(GameStatus.awaiting_human_turn.value, value=GameStatus.awaiting_human_turn.value)
    opponent_thinking = State(GameStatus.opponent_thinking.value, value=GameStatus.opponent_thinking.value)
    rejected_last_submission = State(
        GameStatus.rejected_last_submission.value,
        value=GameStatus.rejected_last_submission.value,
    )
    game_over_human_wins = State(GameStatus.game_over_human_wins.value, value=GameStatus.game_over_human_wins.value)
    game_over_error = State(GameStatus.game_over_error.value, value=GameStatus.game_over_error.value)

    submit = (
        awaiting_first_word.to(opponent_thinking)
        | awaiting_human_turn.to(opponent_thinking)
        | rejected_last_submission.to(opponent_thinking)
    )

    opponent_continued = opponent_thinking.to(awaiting_human_turn)
    opponent_conceded = opponent_thinking.to(game_over_human_wins)
    move_rejected = opponent_thinking.to(rejected_last_submission)
    service_failed = opponent_thinking.to(rejected_last_submission)

    # Difficulty can change at any time, even while the opponent is thinking.
    select_difficulty = (
        awaiting_first_word.to(awaiting_first_word)
        | awaiting_human_turn.to(awaiting_first_word)
        | opponent_thinking.to(awaiting_first_word)
        | rejected_last_submission.to(awaiting_first_word)
        | game_over_human_wins.to(awaiting_first_word)
        | game_over_error.to(awaiting_first_word)
    )
    restart = game_over_human_wins.to(awaiting_first_word) | game_over_error.to(awaiting_first_word)

    configuration_failed = (
        awaiting_first_word.to(game_over_error)
        | awaiting_human_turn.to(game_over_error)
        | opponent_thinking.to(game_over_error)
        | rejected_last_submission.to(game_over_error)
        | game_over_human_wins.to(game_over_error)
        | game_over_error.to(game_over_error)
    )

    def __init__(self, game: GameState):
        super().__init__(start_value=game.status.value)

    @property
    def status(self) -> GameStatus:
        return GameStatus(str(self.current_state.value))


def next_status(state: GameState, event_id: str) -> GameStatus:
    """Return the status `event_id` leads to, raising TransitionNotAllowed if illegal."""

    fsm = TurnFSM(state)
    fsm.send(event_id)
    return fsm.status


def can_send(state: GameState, event_id: str) -> bool:
    try:
        next_status(state, event_id)
    except TransitionNotAllowed:
        return False
    return True
