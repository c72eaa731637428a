"""Two-player chess with pseudo-legal movement.

Pieces move by their normal patterns with blocked paths rejected. Castling,
en passant and check detection are not modelled; the game ends when a king
is captured, a player resigns, or only the two kings remain.
"""
from groupplay.errors import IllegalMove
from .base import GameRules

EMPTY = '.'
FILES = 'abcdefgh'
INITIAL_BOARD = (
    'rnbqkbnr',
    'pppppppp',
    '........',
    '........',
    '........',
    '........',
    'PPPPPPPP',
    'RNBQKBNR',
)
PROMOTIONS = ('q', 'r', 'b', 'n')


def parse_square(square):
    """Map algebraic ``e2`` to (row, col) with row 0 at rank 8."""
    if (not isinstance(square, str) or len(square) != 2
            or square[0] not in FILES or square[1] not in '12345678'):
        raise IllegalMove(f"Invalid square: {square!r}")
    return 8 - int(square[1]), FILES.index(square[0])


def _sign(n):
    return (n > 0) - (n < 0)


def _path_clear(board, fr, fc, tr, tc):
    sr, sc = _sign(tr - fr), _sign(tc - fc)
    r, c = fr + sr, fc + sc
    while (r, c) != (tr, tc):
        if board[r][c] != EMPTY:
            return False
        r, c = r + sr, c + sc
    return True


def can_reach(board, piece, fr, fc, tr, tc):
    white = piece.isupper()
    kind = piece.upper()
    dr, dc = tr - fr, tc - fc

    if kind == 'P':
        step = -1 if white else 1
        start_row = 6 if white else 1
        target = board[tr][tc]
        if dc == 0 and target == EMPTY:
            if dr == step:
                return True
            return fr == start_row and dr == 2 * step and board[fr + step][fc] == EMPTY
        return abs(dc) == 1 and dr == step and target != EMPTY
    if kind == 'N':
        return sorted((abs(dr), abs(dc))) == [1, 2]
    if kind == 'K':
        return max(abs(dr), abs(dc)) == 1

    straight = dr == 0 or dc == 0
    diagonal = abs(dr) == abs(dc)
    if kind == 'R' and not straight:
        return False
    if kind == 'B' and not diagonal:
        return False
    if kind == 'Q' and not (straight or diagonal):
        return False
    return _path_clear(board, fr, fc, tr, tc)


class ChessRules(GameRules):
    game_type = 'chess'
    max_players = 2
    min_players = 2
    symbols = ('white', 'black')

    def initial_state(self):
        return {'board': list(INITIAL_BOARD), 'moves': [], 'captured': []}

    def apply_move(self, state, seats, user_id, move):
        seat = self.seat_of(seats, user_id)
        white = seat.symbol == 'white'

        if move.get('resign'):
            state['resignedBy'] = user_id
            opponent = self.next_after(seats, user_id)
            return self.finish(state, opponent if opponent != user_id else None)

        board = [list(row) for row in state.get('board') or INITIAL_BOARD]
        fr, fc = parse_square(move.get('from'))
        tr, tc = parse_square(move.get('to'))
        if (fr, fc) == (tr, tc):
            raise IllegalMove('A move must change squares')

        piece = board[fr][fc]
        if piece == EMPTY or piece.isupper() != white:
            raise IllegalMove('You have no piece on that square')
        target = board[tr][tc]
        if target != EMPTY and target.isupper() == white:
            raise IllegalMove('You cannot capture your own piece')
        if not can_reach(board, piece, fr, fc, tr, tc):
            raise IllegalMove(f"Illegal move for piece {piece.upper()}")

        board[tr][tc] = piece
        board[fr][fc] = EMPTY
        promotion = None
        if piece.upper() == 'P' and tr in (0, 7):
            promotion = str(move.get('promotion') or 'q').lower()
            if promotion not in PROMOTIONS:
                raise IllegalMove('Promotion must be one of q, r, b, n')
            board[tr][tc] = promotion.upper() if white else promotion

        state['board'] = [''.join(row) for row in board]
        state.setdefault('moves', []).append({
            'userId': user_id,
            'from': move['from'],
            'to': move['to'],
            'piece': piece,
            'captured': target if target != EMPTY else None,
            'promotion': promotion,
        })
        if target != EMPTY:
            state.setdefault('captured', []).append(target)

        if target.upper() == 'K':
            return self.finish(state, user_id)
        remaining = {cell for row in board for cell in row if cell != EMPTY}
        if remaining <= {'K', 'k'}:
            return self.finish(state)
        return self.advance(state, seats, user_id)
