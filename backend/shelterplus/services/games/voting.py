from flask import current_app
from sqlalchemy.exc import IntegrityError

from shelterplus import db
from shelterplus.errors import ValidationError
from shelterplus.models import Vote, utcnow
from .fanout import record_event, publish_event, emit_to_game, broadcast_public_state
from .guards import ensure_round, get_player, parse_round
from .projection import vote_tally

VOTE_SOURCES = ('WEB', 'DISCORD')


def _signal(game_id, round_number, event_type: str, status: str) -> dict:
    game = ensure_round(game_id, round_number)
    round_number = parse_round(round_number)
    event = record_event(game.id, event_type, {'round': round_number})
    db.session.commit()
    emit_to_game(game.id, 'vote:stats', {'round': round_number, 'status': status, 'votes': vote_tally(game.id)})
    publish_event(event)
    return {'gameId': game.id, 'round': round_number, 'status': status}


def start_voting(game_id, round_number) -> dict:
    # Advisory only: casting is never locked by voting state
    return _signal(game_id, round_number, 'VOTING_STARTED', 'started')


def stop_voting(game_id, round_number) -> dict:
    return _signal(game_id, round_number, 'VOTING_STOPPED', 'stopped')


def cast_vote(game_id, round_number, voter_player_id, target_player_id, source='WEB') -> Vote:
    """Upsert the voter's ballot for a round; casting again overwrites it."""
    game = ensure_round(game_id, round_number)
    round_number = parse_round(round_number)
    source = source or 'WEB'
    if source not in VOTE_SOURCES:
        raise ValidationError(f'Unknown vote source: {source}')
    voter = get_player(game, voter_player_id)
    target = get_player(game, target_player_id) if target_player_id is not None else None
    target_id = target.id if target else None

    vote = Vote.query.filter_by(game_id=game.id, round=round_number, voter_player_id=voter.id).first()
    if vote is None:
        vote = Vote(game_id=game.id, round=round_number, voter_player_id=voter.id,
                    target_player_id=target_id, source=source)
        db.session.add(vote)
        try:
            db.session.flush()
        except IntegrityError:
            # A concurrent cast created the row first; fall back to updating it
            db.session.rollback()
            vote = Vote.query.filter_by(game_id=game.id, round=round_number, voter_player_id=voter.id).one()
    vote.target_player_id = target_id
    vote.source = source
    vote.updated_at = utcnow()
    event = record_event(game.id, 'VOTE_CAST', {
        'round': round_number,
        'voterPlayerId': voter.id,
        'targetPlayerId': target_id,
        'source': source,
    })
    db.session.commit()

    current_app.logger.info(f"[vote.cast] game={game.id} round={round_number} voter={voter.id} target={target_id} source={source}")
    emit_to_game(game.id, 'vote:stats', {'round': round_number, 'votes': vote_tally(game.id)})
    publish_event(event)
    broadcast_public_state(game.id)
    return vote


def revote(game_id, round_number) -> dict:
    """Clear every target for the round; ballots stay so voters re-cast."""
    game = ensure_round(game_id, round_number)
    round_number = parse_round(round_number)
    votes = Vote.query.filter_by(game_id=game.id, round=round_number).all()
    for vote in votes:
        vote.target_player_id = None
    event = record_event(game.id, 'REVOTE', {'round': round_number, 'cleared': len(votes)})
    db.session.commit()

    emit_to_game(game.id, 'vote:stats', {'round': round_number, 'status': 'revote', 'votes': vote_tally(game.id)})
    publish_event(event)
    broadcast_public_state(game.id)
    return {'gameId': game.id, 'round': round_number, 'cleared': len(votes)}
