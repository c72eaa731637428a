from groupplay import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone
import uuid

GAME_WAITING = 'waiting'
GAME_ACTIVE = 'active'
GAME_COMPLETED = 'completed'
OPEN_GAME_STATUSES = (GAME_WAITING, GAME_ACTIVE)


def utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = db.Column(db.String(64), unique=True, nullable=True, index=True)
    email = db.Column(db.String(255), nullable=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    profile_image_url = db.Column(db.String(512), nullable=True)
    password_hash = db.Column(db.String(256), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'profileImageUrl': self.profile_image_url,
        }


class Group(db.Model):
    __tablename__ = 'group'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    invite_code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    created_by = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    members = db.relationship('GroupMember', back_populates='group', cascade='all, delete-orphan')

    def to_dict(self, include_members=False):
        data = {
            'id': self.id,
            'name': self.name,
            'inviteCode': self.invite_code,
            'createdBy': self.created_by,
            'createdAt': _iso(self.created_at),
        }
        if include_members:
            data['members'] = [m.to_dict() for m in self.members]
        return data


class GroupMember(db.Model):
    __tablename__ = 'group_member'
    group_id = db.Column(db.Integer, db.ForeignKey('group.id'), primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), primary_key=True)
    joined_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    group = db.relationship('Group', back_populates='members')
    user = db.relationship('User')

    def to_dict(self):
        data = self.user.to_dict() if self.user else {'id': self.user_id}
        data.update({
            'groupId': self.group_id,
            'userId': self.user_id,
            'joinedAt': _iso(self.joined_at),
        })
        return data


class Game(db.Model):
    __tablename__ = 'game'
    # One waiting/active game per group, enforced by the database
    __table_args__ = (
        db.Index(
            'uq_game_open_per_group', 'group_id', unique=True,
            sqlite_where=db.text("status IN ('waiting', 'active')"),
            postgresql_where=db.text("status IN ('waiting', 'active')"),
        ),
    )
    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey('group.id'), nullable=False, index=True)
    game_type = db.Column(db.String(32), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=GAME_WAITING)
    current_turn = db.Column(db.String(64), nullable=True)
    game_state = db.Column(db.JSON, nullable=True)
    winner_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    participants = db.relationship(
        'GameParticipant', back_populates='game',
        order_by='GameParticipant.id', cascade='all, delete-orphan',
    )

    @property
    def players(self):
        return [p for p in self.participants if not p.is_spectator]

    def to_dict(self, include_participants=False):
        data = {
            'id': self.id,
            'groupId': self.group_id,
            'gameType': self.game_type,
            'status': self.status,
            'currentTurn': self.current_turn,
            'gameState': self.game_state,
            'winnerId': self.winner_id,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }
        if include_participants:
            data['participants'] = [p.to_dict() for p in self.participants]
        return data


class GameParticipant(db.Model):
    __tablename__ = 'game_participant'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'user_id', name='uq_participant_game_user'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    player_symbol = db.Column(db.String(16), nullable=True)
    is_spectator = db.Column(db.Boolean, default=False, nullable=False)
    joined_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    game = db.relationship('Game', back_populates='participants')
    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'userId': self.user_id,
            'playerSymbol': self.player_symbol,
            'isSpectator': self.is_spectator,
            'joinedAt': _iso(self.joined_at),
            'user': self.user.to_dict() if self.user else None,
        }


class ChatMessage(db.Model):
    __tablename__ = 'chat_message'
    id = db.Column(db.Integer, primary_key=True)
    group_id = db.Column(db.Integer, db.ForeignKey('group.id'), nullable=False, index=True)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'groupId': self.group_id,
            'userId': self.user_id,
            'message': self.message,
            'createdAt': _iso(self.created_at),
            'user': self.user.to_dict() if self.user else None,
        }


class PlayerStats(db.Model):
    __tablename__ = 'player_stats'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'group_id', 'game_type', name='uq_stats_user_group_type'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False)
    group_id = db.Column(db.Integer, db.ForeignKey('group.id'), nullable=False)
    game_type = db.Column(db.String(32), nullable=False)
    wins = db.Column(db.Integer, default=0, nullable=False)
    losses = db.Column(db.Integer, default=0, nullable=False)
    draws = db.Column(db.Integer, default=0, nullable=False)
    total_games = db.Column(db.Integer, default=0, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'userId': self.user_id,
            'groupId': self.group_id,
            'gameType': self.game_type,
            'wins': self.wins,
            'losses': self.losses,
            'draws': self.draws,
            'totalGames': self.total_games,
        }
