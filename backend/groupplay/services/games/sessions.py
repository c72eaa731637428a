from flask import current_app
from sqlalchemy.orm.attributes import flag_modified

from groupplay import db
from groupplay.errors import Conflict, Forbidden, IllegalMove, NotFound
from groupplay.models import (
    GAME_ACTIVE, GAME_COMPLETED, GAME_WAITING, OPEN_GAME_STATUSES,
    Game, GameParticipant, Group,
)
from groupplay.services import commit
from groupplay.services.groups import is_member
from .rules import Seat, capacity_for, get_rules
from .stats import record_game_result


def _open_games(group_id):
    return Game.query.filter(Game.group_id == group_id, Game.status.in_(OPEN_GAME_STATUSES))


def _locked_game(game_id):
    game = Game.query.filter_by(id=game_id).with_for_update().first()
    if not game:
        raise NotFound('Game not found')
    return game


def get_game(game_id):
    game = db.session.get(Game, game_id)
    if not game:
        raise NotFound('Game not found')
    return game


def get_active_game(group_id):
    """Newest waiting or active game of the group, or None."""
    return _open_games(group_id).order_by(Game.created_at.desc(), Game.id.desc()).first()


def create_game(group_id, creator_id, game_type):
    """Open a game in the group with the creator seated first.

    The partial unique index on open games backs up the existence check, so
    a concurrent create surfaces as Conflict rather than a second open game.
    """
    rules = get_rules(game_type)
    if not db.session.get(Group, group_id):
        raise NotFound('Group not found')
    if not is_member(group_id, creator_id):
        raise Forbidden('You are not a member of this group')
    if _open_games(group_id).first():
        raise Conflict('This group already has an active game')

    game = Game(
        group_id=group_id,
        game_type=game_type,
        status=GAME_WAITING,
        current_turn=creator_id,
        game_state=rules.initial_state(),
    )
    game.participants.append(
        GameParticipant(user_id=creator_id, player_symbol=rules.symbol_for(0), is_spectator=False)
    )
    db.session.add(game)
    commit('This group already has an active game')

    current_app.logger.info("Created %s game %s in group %s by user %s", game_type, game.id, group_id, creator_id)
    return game


def join_game(game_id, user_id):
    """Seat the user, or make them a spectator once the game is full.

    A game moves from waiting to active as soon as enough players are seated.
    """
    game = _locked_game(game_id)
    if not is_member(game.group_id, user_id):
        db.session.rollback()
        raise Forbidden('You are not a member of this group')
    if GameParticipant.query.filter_by(game_id=game.id, user_id=user_id).first():
        db.session.rollback()
        raise Conflict('You are already in this game')

    max_players, min_players = capacity_for(game.game_type)
    player_count = GameParticipant.query.filter_by(game_id=game.id, is_spectator=False).count()
    spectator = player_count >= max_players or game.status == GAME_COMPLETED
    symbol = None if spectator else get_rules(game.game_type).symbol_for(player_count)

    participant = GameParticipant(
        game_id=game.id, user_id=user_id, player_symbol=symbol, is_spectator=spectator
    )
    db.session.add(participant)
    if not spectator and player_count + 1 >= min_players and game.status == GAME_WAITING:
        game.status = GAME_ACTIVE
    commit('You are already in this game')

    current_app.logger.info(
        "User %s joined game %s as %s", user_id, game.id, 'spectator' if spectator else symbol
    )
    return participant


def make_move(game_id, user_id, move):
    """Validate turn ownership, apply the move through the game's rules and persist it."""
    game = _locked_game(game_id)
    if game.status != GAME_ACTIVE:
        db.session.rollback()
        raise Conflict('Game is not active')
    if game.current_turn != user_id:
        db.session.rollback()
        raise Forbidden('Not your turn')

    rules = get_rules(game.game_type)
    seats = [Seat(p.user_id, p.player_symbol) for p in game.players]
    try:
        outcome = rules.play(game.game_state, seats, user_id, move)
    except IllegalMove:
        db.session.rollback()
        raise

    game.game_state = outcome.game_state
    flag_modified(game, 'game_state')
    game.current_turn = outcome.next_turn
    game.status = outcome.status
    game.winner_id = outcome.winner_id
    if outcome.status == GAME_COMPLETED:
        record_game_result(game, [s.user_id for s in seats], outcome.winner_id)
    commit('Game was updated concurrently')

    current_app.logger.info(
        "Move by %s in game %s -> status=%s next=%s", user_id, game_id, outcome.status, outcome.next_turn
    )
    return outcome
