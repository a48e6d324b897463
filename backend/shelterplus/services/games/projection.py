"""Read-side views of a game: host state, public/spectator state and metrics."""

from sqlalchemy import func

from shelterplus import db
from shelterplus.errors import ValidationError
from shelterplus.models import Game, Lobby, Player, GameEvent, Vote, RevealPlan, GameAdmin, to_iso
from .guards import get_game
from .minutes import minute_queue, running_request, serialize_request


def vote_tally(game_id: int) -> dict:
    """Count non-null targets over the whole game, not just one round."""
    rows = (db.session.query(Vote.target_player_id, func.count(Vote.id))
            .filter(Vote.game_id == game_id, Vote.target_player_id.isnot(None))
            .group_by(Vote.target_player_id)
            .all())
    return {str(target_id): count for target_id, count in rows}


def build_public_state(game_id, enforce_spectators: bool = True) -> dict:
    game = get_game(game_id)
    if enforce_spectators and not game.is_spectators_enabled:
        raise ValidationError('Spectators are disabled for this game')

    players = []
    for player in game.players:
        players.append({
            'id': player.id,
            'number': player.number,
            'nickname': player.nickname,
            'status': player.status,
            'role': player.role,
            'openedCards': [
                {
                    'category': card.category,
                    'payload': card.payload,
                    'openedAt': to_iso(card.opened_at),
                    'openedRound': card.opened_round,
                }
                for card in player.cards if card.is_open
            ],
        })

    return {
        'id': game.id,
        'apocalypse': game.apocalypse,
        'bunker': game.bunker,
        'seats': game.seats,
        'currentRound': game.current_round,
        'ending': game.ending,
        'players': players,
        'votes': vote_tally(game.id),
        'updatedAt': to_iso(game.updated_at),
    }


def get_state(game_id) -> dict:
    """Host view: full game with cards plus the current round's live data."""
    game = get_game(game_id)
    current = game.current_round
    running = running_request(game.id)
    payload = game.to_dict()
    payload['lobby'] = game.lobby.to_dict(include_players=False)
    payload['minutes'] = {
        'queue': minute_queue(game.id, current),
        'running': serialize_request(running) if running else None,
    }
    payload['votes'] = [v.to_dict() for v in game.votes.filter_by(round=current).order_by(Vote.id)]
    payload['voteStats'] = vote_tally(game.id)
    payload['revealPlans'] = [p.to_dict() for p in game.reveal_plans.filter_by(round=current).order_by(RevealPlan.id)]
    payload['admins'] = [a.to_dict() for a in game.admins.order_by(GameAdmin.id)]
    return payload


def get_metrics() -> dict:
    return {
        'lobbies': Lobby.query.count(),
        'games': Game.query.count(),
        'activeGames': Game.query.filter(Game.ending.is_(None)).count(),
        'players': Player.query.filter_by(role='PLAYER').count(),
        'spectators': Player.query.filter_by(role='SPECTATOR').count(),
        'events': GameEvent.query.count(),
    }
