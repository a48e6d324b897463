from shelterplus import db
from shelterplus.errors import NotFoundError, ValidationError
from shelterplus.models import Game, Player, Lobby
from .card_pool import CATEGORY_ORDER


def get_lobby(lobby_id) -> Lobby:
    lobby = db.session.get(Lobby, _as_id(lobby_id, 'Lobby'))
    if not lobby:
        raise NotFoundError('Lobby not found')
    return lobby


def get_game(game_id) -> Game:
    game = db.session.get(Game, _as_id(game_id, 'Game'))
    if not game:
        raise NotFoundError('Game not found')
    return game


def get_player(game: Game, player_id) -> Player:
    player = Player.query.filter_by(id=_as_id(player_id, 'Player'), game_id=game.id).first()
    if not player:
        raise NotFoundError('Player not found')
    return player


def ensure_round(game_id, round_number) -> Game:
    """Load a game and check ``round_number`` is at most one ahead of it."""
    game = get_game(game_id)
    round_number = parse_round(round_number)
    if round_number > game.current_round + 1:
        raise ValidationError(
            f'Round {round_number} is not reachable; current round is {game.current_round}'
        )
    return game


def parse_round(value) -> int:
    try:
        round_number = int(value)
    except (TypeError, ValueError):
        raise ValidationError('round must be an integer')
    if round_number < 1:
        raise ValidationError('round must be positive')
    return round_number


def parse_category(value) -> str:
    if value not in CATEGORY_ORDER:
        raise ValidationError(f'Unknown category: {value}')
    return value


def _as_id(value, label: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NotFoundError(f'{label} not found')
