"""Static registry of game rule modules, keyed by game type tag."""
from groupplay.errors import ValidationError
from .base import GameRules, MoveOutcome, Seat
from .chess import ChessRules
from .coin_toss import CoinTossRules
from .rock_paper_scissors import RockPaperScissorsRules
from .tic_tac_toe import TicTacToeRules
from .typing_challenge import TypingChallengeRules
from .word_battle import WordBattleRules

RULES = {
    rules.game_type: rules
    for rules in (
        ChessRules(),
        TicTacToeRules(),
        RockPaperScissorsRules(),
        CoinTossRules(),
        WordBattleRules(),
        TypingChallengeRules(),
    )
}

# Capacity for tags with no registered rules
DEFAULT_MAX_PLAYERS = 3
DEFAULT_MIN_PLAYERS = 2


def get_rules(game_type) -> GameRules:
    try:
        return RULES[game_type]
    except (KeyError, TypeError):
        raise ValidationError(f"Unsupported game type: {game_type}") from None


def capacity_for(game_type):
    """(max players, min players to start) for a game type."""
    rules = RULES.get(game_type) if isinstance(game_type, str) else None
    if rules is None:
        return DEFAULT_MAX_PLAYERS, DEFAULT_MIN_PLAYERS
    return rules.max_players, rules.min_players


__all__ = ['RULES', 'GameRules', 'MoveOutcome', 'Seat', 'capacity_for', 'get_rules']
