from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from groupplay.errors import ValidationError
from groupplay.services.games import sessions

games = Blueprint('games', __name__)


@games.route('', methods=['POST'])
@login_required
def create_game():
    """
    Opens a game in a group and seats the current user as the first player.
    """
    data = request.get_json(silent=True) or {}
    group_id = data.get('groupId')
    game_type = data.get('gameType')
    if isinstance(group_id, bool) or not isinstance(group_id, int):
        raise ValidationError('groupId must be an integer')
    if not game_type:
        raise ValidationError('gameType is required')

    game = sessions.create_game(group_id, current_user.id, game_type)
    return jsonify(game.to_dict(include_participants=True)), 201


@games.route('/<int:game_id>', methods=['GET'])
@login_required
def get_game(game_id):
    """
    Returns the full state of a game, including participants.
    """
    game = sessions.get_game(game_id)
    return jsonify(game.to_dict(include_participants=True))


@games.route('/<int:game_id>/join', methods=['POST'])
@login_required
def join_game(game_id):
    """
    Joins a game as a player, or as a spectator once the player seats are taken.
    """
    participant = sessions.join_game(game_id, current_user.id)
    role = 'spectator' if participant.is_spectator else f'player {participant.player_symbol}'
    return jsonify({
        'message': f'Joined game {game_id} as {role}',
        'participant': participant.to_dict(),
    }), 200


@games.route('/<int:game_id>/move', methods=['POST'])
@login_required
def make_move(game_id):
    """
    Applies the current user's move and returns the resulting game state.
    """
    data = request.get_json(silent=True) or {}
    if 'move' not in data:
        raise ValidationError('move is required')
    outcome = sessions.make_move(game_id, current_user.id, data['move'])
    return jsonify(outcome.to_dict()), 200
