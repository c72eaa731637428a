import math
import random

from groupplay.errors import IllegalMove
from groupplay.models import GAME_ACTIVE
from .base import GameRules, MoveOutcome

PROMPTS = (
    'The quick brown fox jumps over the lazy dog.',
    'Pack my box with five dozen liquor jugs.',
    'Sphinx of black quartz, judge my vow.',
    'How vexingly quick daft zebras jump.',
    'Bright vixens jump; dozy fowl quack.',
)


def score_attempt(prompt, text, elapsed_ms):
    """Words per minute scaled by positional character accuracy."""
    matched = sum(1 for a, b in zip(prompt, text) if a == b)
    accuracy = matched / max(len(prompt), len(text), 1)
    wpm = (len(text) / 5) / (elapsed_ms / 60000)
    return round(wpm, 2), round(accuracy, 4), round(wpm * accuracy, 2)


class TypingChallengeRules(GameRules):
    """Each seat types the shared prompt once; the best score wins."""
    game_type = 'typing-challenge'

    def __init__(self, rng=None):
        self.rng = rng or random.Random()

    def initial_state(self):
        return {'prompt': self.rng.choice(PROMPTS), 'results': {}}

    def apply_move(self, state, seats, user_id, move):
        self.seat_of(seats, user_id)
        results = state.setdefault('results', {})
        if user_id in results:
            raise IllegalMove('You already submitted your attempt')

        text = move.get('text')
        elapsed_ms = move.get('elapsedMs')
        if not isinstance(text, str):
            raise IllegalMove('Typed text is required')
        if (isinstance(elapsed_ms, bool) or not isinstance(elapsed_ms, (int, float))
                or not math.isfinite(elapsed_ms) or elapsed_ms <= 0):
            raise IllegalMove('elapsedMs must be a positive number')

        prompt = state.get('prompt') or PROMPTS[0]
        wpm, accuracy, score = score_attempt(prompt, text, elapsed_ms)
        results[user_id] = {'wpm': wpm, 'accuracy': accuracy, 'score': score, 'elapsedMs': elapsed_ms}

        pending = [s for s in seats if s.user_id not in results]
        if not pending:
            return self.finish(state, self.unique_best({uid: r['score'] for uid, r in results.items()}))

        # Turn passes to the next seat that still has to type
        ids = [s.user_id for s in seats]
        start = ids.index(user_id)
        for offset in range(1, len(ids)):
            candidate = ids[(start + offset) % len(ids)]
            if candidate not in results:
                return MoveOutcome(state, candidate, GAME_ACTIVE)
        return MoveOutcome(state, pending[0].user_id, GAME_ACTIVE)
