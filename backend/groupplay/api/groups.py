from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from groupplay.services import groups as group_service
from groupplay.services.games.sessions import get_active_game

groups = Blueprint('groups', __name__)


@groups.route('', methods=['POST'])
@login_required
def create_group():
    """
    Creates a group and adds the current user as its first member.
    """
    data = request.get_json(silent=True) or {}
    group = group_service.create_group(current_user.id, data.get('name'))
    return jsonify(group.to_dict(include_members=True)), 201


@groups.route('', methods=['GET'])
@login_required
def list_groups():
    """
    Returns the groups the current user belongs to.
    """
    return jsonify([g.to_dict() for g in group_service.list_user_groups(current_user.id)])


@groups.route('/<int:group_id>', methods=['GET'])
@login_required
def get_group(group_id):
    group = group_service.get_group(group_id)
    return jsonify(group.to_dict(include_members=True))


@groups.route('/invite/<string:invite_code>', methods=['GET'])
@login_required
def preview_invite(invite_code):
    """
    Resolves an invite code to its group without joining it.
    """
    group = group_service.get_group_by_invite_code(invite_code)
    return jsonify(group.to_dict())


@groups.route('/join/<string:invite_code>', methods=['POST'])
@login_required
def join_group(invite_code):
    """
    Joins the group behind an invite code. Fails when the group is full or
    the user is already a member.
    """
    group = group_service.join_group(invite_code, current_user.id)
    return jsonify({
        'message': f'Successfully joined {group.name}',
        'group': group.to_dict(include_members=True),
    }), 200


@groups.route('/<int:group_id>/leave', methods=['DELETE'])
@login_required
def leave_group(group_id):
    group_service.leave_group(group_id, current_user.id)
    return jsonify({'message': 'You have left the group.'}), 200


@groups.route('/<int:group_id>/members', methods=['GET'])
@login_required
def list_members(group_id):
    return jsonify([m.to_dict() for m in group_service.list_members(group_id)])


@groups.route('/<int:group_id>/leaderboard', methods=['GET'])
@login_required
def leaderboard(group_id):
    return jsonify(group_service.leaderboard(group_id))


@groups.route('/<int:group_id>/active-game', methods=['GET'])
@login_required
def active_game(group_id):
    """
    Returns the group's waiting or active game with its participants, or null.
    """
    game = get_active_game(group_id)
    return jsonify(game.to_dict(include_participants=True) if game else None)


@groups.route('/<int:group_id>/messages', methods=['GET'])
@login_required
def list_messages(group_id):
    return jsonify([m.to_dict() for m in group_service.list_messages(group_id)])


@groups.route('/<int:group_id>/messages', methods=['POST'])
@login_required
def post_message(group_id):
    data = request.get_json(silent=True) or {}
    message = group_service.post_message(group_id, current_user.id, data.get('message'))
    return jsonify(message.to_dict()), 201
