from flask import current_app

from groupplay import db
from groupplay.models import Game, PlayerStats


def record_game_result(game: Game, player_ids, winner_id) -> None:
    """Apply a completed game to each player's stats row.

    Every non-spectator gets +1 total game and exactly one of: a win if they
    are the winner, a draw if there is no winner, otherwise a loss. Rows are
    created on first completion for (user, group, game type). The caller
    commits.
    """
    for user_id in player_ids:
        stats = PlayerStats.query.filter_by(
            user_id=user_id, group_id=game.group_id, game_type=game.game_type
        ).first()
        if stats is None:
            stats = PlayerStats(
                user_id=user_id, group_id=game.group_id, game_type=game.game_type,
                wins=0, losses=0, draws=0, total_games=0,
            )
            db.session.add(stats)

        if winner_id is None:
            stats.draws += 1
        elif user_id == winner_id:
            stats.wins += 1
        else:
            stats.losses += 1
        stats.total_games += 1

    current_app.logger.info(
        "Recorded result of game %s for %d players (winner=%s)", game.id, len(player_ids), winner_id
    )
