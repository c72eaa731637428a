"""Group lifecycle: invite codes, membership cap, leaderboard and chat."""
import secrets
import string

from flask import current_app

from groupplay import db
from groupplay.errors import Conflict, NotFound, ValidationError
from groupplay.models import ChatMessage, Group, GroupMember, PlayerStats, User
from groupplay.services import commit

INVITE_ALPHABET = string.ascii_uppercase + string.digits


def generate_invite_code(length=None):
    """Generate an invite code not used by any existing group."""
    length = length or current_app.config.get('INVITE_CODE_LENGTH', 8)
    while True:
        code = ''.join(secrets.choice(INVITE_ALPHABET) for _ in range(length))
        if not Group.query.filter_by(invite_code=code).first():
            return code


def create_group(creator_id, name):
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Group name is required')

    group = Group(name=name.strip(), invite_code=generate_invite_code(), created_by=creator_id)
    db.session.add(group)
    db.session.flush()
    db.session.add(GroupMember(group_id=group.id, user_id=creator_id))
    commit('Invite code collision, please retry')

    current_app.logger.info("Created group %s (%s) by user %s", group.id, group.invite_code, creator_id)
    return group


def get_group(group_id):
    group = db.session.get(Group, group_id)
    if not group:
        raise NotFound('Group not found')
    return group


def get_group_by_invite_code(invite_code):
    group = Group.query.filter_by(invite_code=(invite_code or '').upper()).first()
    if not group:
        raise NotFound('Invalid invite code')
    return group


def join_group(invite_code, user_id):
    """Add the user to the group behind ``invite_code``.

    The group row is locked while the member count is checked so that two
    concurrent joins cannot both pass the cap; the composite key on
    ``group_member`` rejects a duplicate insert that slips through.
    """
    group = (
        Group.query.filter_by(invite_code=(invite_code or '').upper())
        .with_for_update()
        .first()
    )
    if not group:
        raise NotFound('Invalid invite code')

    max_members = current_app.config.get('MAX_GROUP_MEMBERS', 3)
    member_count = GroupMember.query.filter_by(group_id=group.id).count()
    if member_count >= max_members:
        db.session.rollback()
        raise Conflict('Group is full')

    if GroupMember.query.filter_by(group_id=group.id, user_id=user_id).first():
        db.session.rollback()
        raise Conflict('You are already a member of this group')

    db.session.add(GroupMember(group_id=group.id, user_id=user_id))
    commit('You are already a member of this group')

    current_app.logger.info("User %s joined group %s", user_id, group.id)
    return group


def leave_group(group_id, user_id):
    removed = GroupMember.query.filter_by(group_id=group_id, user_id=user_id).delete()
    db.session.commit()
    if removed:
        current_app.logger.info("User %s left group %s", user_id, group_id)


def is_member(group_id, user_id):
    return GroupMember.query.filter_by(group_id=group_id, user_id=user_id).first() is not None


def list_members(group_id):
    return (
        GroupMember.query.filter_by(group_id=group_id)
        .order_by(GroupMember.joined_at, GroupMember.user_id)
        .all()
    )


def list_user_groups(user_id):
    return (
        Group.query.join(GroupMember, GroupMember.group_id == Group.id)
        .filter(GroupMember.user_id == user_id)
        .order_by(Group.created_at.desc(), Group.id.desc())
        .all()
    )


def leaderboard(group_id):
    """Summed wins per member across all game types, best first.

    Members without any stats rows are kept with ``totalWins`` of 0.
    """
    total_wins = db.func.coalesce(db.func.sum(PlayerStats.wins), 0).label('total_wins')
    rows = (
        db.session.query(User, total_wins)
        .join(GroupMember, GroupMember.user_id == User.id)
        .outerjoin(
            PlayerStats,
            db.and_(PlayerStats.user_id == User.id, PlayerStats.group_id == GroupMember.group_id),
        )
        .filter(GroupMember.group_id == group_id)
        .group_by(User.id)
        .order_by(total_wins.desc(), User.username)
        .all()
    )
    board = []
    for user, wins in rows:
        entry = user.to_dict()
        entry['totalWins'] = int(wins or 0)
        board.append(entry)
    return board


def list_messages(group_id):
    return (
        ChatMessage.query.filter_by(group_id=group_id)
        .order_by(ChatMessage.created_at, ChatMessage.id)
        .all()
    )


def post_message(group_id, user_id, text):
    if not isinstance(text, str) or not text.strip():
        raise ValidationError('Message text is required')
    get_group(group_id)

    message = ChatMessage(group_id=group_id, user_id=user_id, message=text)
    db.session.add(message)
    commit('Could not store message')
    return message
