import copy
from collections import namedtuple
from dataclasses import dataclass
from typing import Any, List, Optional

from groupplay.errors import IllegalMove
from groupplay.models import GAME_ACTIVE, GAME_COMPLETED

# A non-spectator participant, in join order
Seat = namedtuple('Seat', ['user_id', 'symbol'])


@dataclass
class MoveOutcome:
    game_state: Any
    next_turn: Optional[str]
    status: str
    winner_id: Optional[str] = None

    def to_dict(self):
        return {
            'gameState': self.game_state,
            'nextTurn': self.next_turn,
            'status': self.status,
            'winnerId': self.winner_id,
        }


class GameRules:
    """Move application for one game type.

    Subclasses implement ``initial_state`` and ``apply_move``. ``apply_move``
    receives a private copy of the state and the seats in join order, and
    returns a ``MoveOutcome``. Rejected moves raise ``IllegalMove``.
    """
    game_type: str = ''
    max_players = 3
    min_players = 2
    symbols = ()

    def symbol_for(self, index: int) -> Optional[str]:
        """Symbol for the ``index``-th non-spectator (0 based)."""
        if index >= self.max_players:
            return None
        if self.symbols:
            return self.symbols[index] if index < len(self.symbols) else None
        return f"player{index + 1}"

    def initial_state(self):
        return {}

    def play(self, state, seats: List[Seat], user_id: str, move) -> MoveOutcome:
        if not isinstance(move, dict):
            raise IllegalMove('Move must be an object')
        state = copy.deepcopy(state) if state else self.initial_state()
        return self.apply_move(state, seats, user_id, move)

    def apply_move(self, state, seats: List[Seat], user_id: str, move) -> MoveOutcome:
        raise NotImplementedError

    # Helpers shared by the rule modules

    @staticmethod
    def seat_of(seats, user_id) -> Seat:
        for seat in seats:
            if seat.user_id == user_id:
                return seat
        raise IllegalMove('You are not a player in this game')

    @staticmethod
    def next_after(seats, user_id) -> Optional[str]:
        ids = [s.user_id for s in seats]
        if not ids:
            return None
        if user_id not in ids:
            return ids[0]
        return ids[(ids.index(user_id) + 1) % len(ids)]

    def advance(self, state, seats, user_id) -> MoveOutcome:
        return MoveOutcome(state, self.next_after(seats, user_id), GAME_ACTIVE)

    @staticmethod
    def finish(state, winner_id=None) -> MoveOutcome:
        return MoveOutcome(state, None, GAME_COMPLETED, winner_id)

    @staticmethod
    def unique_best(scores) -> Optional[str]:
        """Key with the strictly highest score, or None on a tie."""
        if not scores:
            return None
        best = max(scores.values())
        leaders = [k for k, v in scores.items() if v == best]
        return leaders[0] if len(leaders) == 1 else None
