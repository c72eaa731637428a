from groupplay.errors import IllegalMove
from .base import GameRules

WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


class TicTacToeRules(GameRules):
    """3x3 board shared by up to three symbols; three in a row wins."""
    game_type = 'tic-tac-toe'
    max_players = 3
    symbols = ('X', 'O', '△')

    def initial_state(self):
        return {'board': [None] * 9}

    def apply_move(self, state, seats, user_id, move):
        seat = self.seat_of(seats, user_id)
        board = state.setdefault('board', [None] * 9)

        position = move.get('position')
        if isinstance(position, bool) or not isinstance(position, int) or not 0 <= position < 9:
            raise IllegalMove('Position must be an integer between 0 and 8')
        if board[position] is not None:
            raise IllegalMove('That square is already taken')

        board[position] = seat.symbol
        state['lastMove'] = {'userId': user_id, 'position': position}

        if any(all(board[i] == seat.symbol for i in line) for line in WIN_LINES):
            return self.finish(state, user_id)
        if all(cell is not None for cell in board):
            return self.finish(state)
        return self.advance(state, seats, user_id)
