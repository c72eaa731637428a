from groupplay.errors import IllegalMove
from .base import GameRules

BEATS = {'rock': 'scissors', 'paper': 'rock', 'scissors': 'paper'}
MAX_ROUNDS = 5


class RockPaperScissorsRules(GameRules):
    """Each seat picks in turn; the round resolves once everyone has picked.

    A round has a winner only when exactly two distinct choices were made
    and a single player holds the winning one. Otherwise the round is tied
    and replayed, up to ``MAX_ROUNDS`` before the game is a draw.
    """
    game_type = 'rock-paper-scissors'

    def initial_state(self):
        return {'round': 1, 'choices': {}, 'history': []}

    def apply_move(self, state, seats, user_id, move):
        self.seat_of(seats, user_id)
        choice = move.get('choice')
        if not isinstance(choice, str) or choice not in BEATS:
            raise IllegalMove('Choice must be rock, paper or scissors')

        choices = state.setdefault('choices', {})
        if user_id in choices:
            raise IllegalMove('You already chose this round')
        choices[user_id] = choice

        if any(s.user_id not in choices for s in seats):
            return self.advance(state, seats, user_id)

        winner_id = self._round_winner(choices)
        state.setdefault('history', []).append({
            'round': state.get('round', 1),
            'choices': dict(choices),
            'winnerId': winner_id,
        })
        if winner_id:
            return self.finish(state, winner_id)

        state['round'] = state.get('round', 1) + 1
        state['choices'] = {}
        if state['round'] > MAX_ROUNDS:
            return self.finish(state)
        # Tied round: the first seat opens the next one
        return self.advance(state, seats, seats[-1].user_id)

    @staticmethod
    def _round_winner(choices):
        distinct = set(choices.values())
        if len(distinct) != 2:
            return None
        a, b = distinct
        winning = a if BEATS[a] == b else b
        holders = [uid for uid, c in choices.items() if c == winning]
        return holders[0] if len(holders) == 1 else None
