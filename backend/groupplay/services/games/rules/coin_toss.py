import random

from groupplay.errors import IllegalMove
from .base import GameRules

SIDES = ('heads', 'tails')


class CoinTossRules(GameRules):
    """Every seat calls a side, then the coin is flipped once.

    A single correct caller wins; no correct caller or several is a draw.
    """
    game_type = 'coin-toss'

    def __init__(self, rng=None):
        self.rng = rng or random.Random()

    def initial_state(self):
        return {'calls': {}, 'result': None}

    def apply_move(self, state, seats, user_id, move):
        self.seat_of(seats, user_id)
        call = move.get('call')
        if not isinstance(call, str) or call not in SIDES:
            raise IllegalMove('Call must be heads or tails')

        calls = state.setdefault('calls', {})
        if user_id in calls:
            raise IllegalMove('You already made your call')
        calls[user_id] = call

        if any(s.user_id not in calls for s in seats):
            return self.advance(state, seats, user_id)

        result = self.rng.choice(SIDES)
        state['result'] = result
        correct = [uid for uid, c in calls.items() if c == result]
        return self.finish(state, correct[0] if len(correct) == 1 else None)
