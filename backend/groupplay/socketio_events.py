"""Socket.IO relay: group rooms for chat and game notifications.

Connections join ``group:<id>`` rooms after a membership check. Chat is
persisted before it is broadcast; game events are forwarded as-is and are
not authoritative. Failures are logged and never sent back to clients.
"""
from functools import wraps

from flask import current_app
from flask_login import current_user
from flask_socketio import emit, join_room, leave_room, rooms

from groupplay import db, socketio
from groupplay.errors import GroupPlayError
from groupplay.services import groups as group_service

NAMESPACE = '/ws'


def _room(group_id) -> str:
    return f"group:{group_id}"


def _group_id(data):
    group_id = data.get('groupId') if isinstance(data, dict) else None
    if isinstance(group_id, bool) or not isinstance(group_id, int):
        return None
    return group_id


def relay_handler(fn):
    """Log and drop malformed events and unexpected failures."""
    @wraps(fn)
    def wrapper(data=None):
        try:
            if not current_user.is_authenticated:
                current_app.logger.warning("[relay] %s from unauthenticated socket", fn.__name__)
                return
            group_id = _group_id(data)
            if group_id is None:
                current_app.logger.warning("[relay] %s without a valid groupId: %r", fn.__name__, data)
                return
            fn(group_id, data)
        except GroupPlayError as exc:
            db.session.rollback()
            current_app.logger.warning("[relay] %s rejected: %s", fn.__name__, exc.message)
        except Exception:
            db.session.rollback()
            current_app.logger.exception("[relay] %s failed", fn.__name__)
    return wrapper


def _in_room(group_id) -> bool:
    if _room(group_id) in rooms():
        return True
    current_app.logger.warning("[relay] user %s is not in room %s", current_user.id, _room(group_id))
    return False


def handle_connect(auth=None):
    if not current_user.is_authenticated:
        return False
    emit('connected', {'message': f'Connected to {NAMESPACE}', 'userId': current_user.id})


def handle_disconnect(*args):
    # Socket.IO drops the connection from its rooms; nothing else is tracked
    current_app.logger.debug("[relay] disconnect")


@relay_handler
def handle_join_group(group_id, data):
    if not group_service.is_member(group_id, current_user.id):
        current_app.logger.warning("[relay] user %s tried to join group %s without membership",
                                   current_user.id, group_id)
        return
    join_room(_room(group_id))
    emit('joined', {'room': _room(group_id), 'groupId': group_id})


@relay_handler
def handle_leave_group(group_id, data):
    leave_room(_room(group_id))
    emit('left', {'room': _room(group_id), 'groupId': group_id})


@relay_handler
def handle_send_message(group_id, data):
    if not _in_room(group_id):
        return
    message = group_service.post_message(group_id, current_user.id, data.get('message'))
    emit('new-message', message.to_dict(), to=_room(group_id))


@relay_handler
def handle_game_move(group_id, data):
    if not _in_room(group_id):
        return
    emit('game-update', {
        'groupId': group_id,
        'move': data.get('move'),
        'userId': current_user.id,
        'user': current_user.to_dict(),
    }, to=_room(group_id), include_self=False)


@relay_handler
def handle_game_state_update(group_id, data):
    if not _in_room(group_id):
        return
    emit('game-state-changed', {
        'groupId': group_id,
        'gameState': data.get('gameState'),
        'userId': current_user.id,
    }, to=_room(group_id), include_self=False)


@relay_handler
def handle_player_status_update(group_id, data):
    if not _in_room(group_id):
        return
    emit('player-status-changed', {
        'groupId': group_id,
        'userId': current_user.id,
        'status': data.get('status'),
    }, to=_room(group_id), include_self=False)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('join-group', handle_join_group, namespace=NAMESPACE)
    socketio.on_event('leave-group', handle_leave_group, namespace=NAMESPACE)
    socketio.on_event('send-message', handle_send_message, namespace=NAMESPACE)
    socketio.on_event('game-move', handle_game_move, namespace=NAMESPACE)
    socketio.on_event('game-state-update', handle_game_state_update, namespace=NAMESPACE)
    socketio.on_event('player-status-update', handle_player_status_update, namespace=NAMESPACE)
