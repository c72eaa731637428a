from groupplay.errors import IllegalMove
from .base import GameRules

WORDS_PER_PLAYER = 3
MIN_WORD_LENGTH = 2


class WordBattleRules(GameRules):
    """Word chain: each word starts with the last letter of the previous one.

    A word scores its length. After every seat has played
    ``WORDS_PER_PLAYER`` words the highest total wins.
    """
    game_type = 'word-battle'

    def initial_state(self):
        return {'words': [], 'scores': {}}

    def apply_move(self, state, seats, user_id, move):
        self.seat_of(seats, user_id)
        word = move.get('word')
        if not isinstance(word, str):
            raise IllegalMove('Word is required')
        word = word.strip().lower()
        if len(word) < MIN_WORD_LENGTH or not word.isalpha():
            raise IllegalMove(f"Words must be at least {MIN_WORD_LENGTH} letters")

        words = state.setdefault('words', [])
        if any(w['word'] == word for w in words):
            raise IllegalMove(f"'{word}' has already been played")
        if words and not word.startswith(words[-1]['word'][-1]):
            raise IllegalMove(f"Word must start with '{words[-1]['word'][-1]}'")

        words.append({'userId': user_id, 'word': word, 'points': len(word)})
        scores = state.setdefault('scores', {})
        scores[user_id] = scores.get(user_id, 0) + len(word)

        played = {}
        for w in words:
            played[w['userId']] = played.get(w['userId'], 0) + 1
        if all(played.get(s.user_id, 0) >= WORDS_PER_PLAYER for s in seats):
            return self.finish(state, self.unique_best({s.user_id: scores.get(s.user_id, 0) for s in seats}))
        return self.advance(state, seats, user_id)
