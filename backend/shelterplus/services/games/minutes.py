"""Speaking-minute queue and timer.

The server never ticks the timer. Remaining time is derived from
``started_at`` and ``duration_sec`` whenever a request is read.
"""

import math
from datetime import datetime
from typing import Optional

from flask import current_app

from shelterplus import db
from shelterplus.errors import NotFoundError, ValidationError
from shelterplus.models import MinuteRequest, utcnow
from .fanout import record_event, publish_event, emit_to_game
from .guards import ensure_round, get_game, get_player, parse_round

TIMER_ACTIONS = ('start', 'stop', 'reset')


def remaining_seconds(request: MinuteRequest, now: Optional[datetime] = None) -> Optional[int]:
    if request.started_at is None or request.duration_sec is None:
        return None
    now = now or utcnow()
    elapsed = math.floor((now - request.started_at).total_seconds())
    return max(0, request.duration_sec - elapsed)


def serialize_request(request: MinuteRequest, now: Optional[datetime] = None) -> dict:
    data = request.to_dict()
    data['remainingSec'] = remaining_seconds(request, now)
    return data


def minute_queue(game_id: int, round_number: int) -> list:
    now = utcnow()
    requests = (MinuteRequest.query
                .filter_by(game_id=game_id, round=round_number)
                .order_by(MinuteRequest.position, MinuteRequest.id)
                .all())
    return [serialize_request(r, now) for r in requests]


def running_request(game_id: int) -> Optional[MinuteRequest]:
    return (MinuteRequest.query
            .filter(MinuteRequest.game_id == game_id, MinuteRequest.started_at.isnot(None))
            .order_by(MinuteRequest.started_at.desc(), MinuteRequest.id.desc())
            .first())


def _emit_queue(game_id: int, round_number: int) -> None:
    emit_to_game(game_id, 'minutes:queue', {'round': round_number, 'queue': minute_queue(game_id, round_number)})


def enqueue_minute(game_id, round_number, player_id) -> MinuteRequest:
    game = ensure_round(game_id, round_number)
    round_number = parse_round(round_number)
    player = get_player(game, player_id)

    existing = MinuteRequest.query.filter_by(game_id=game.id, round=round_number, player_id=player.id).first()
    if existing:
        return existing

    position = MinuteRequest.query.filter_by(game_id=game.id, round=round_number).count() + 1
    request = MinuteRequest(game_id=game.id, round=round_number, player_id=player.id,
                            position=position, approved=False)
    db.session.add(request)
    event = record_event(game.id, 'MINUTE_ENQUEUED', {
        'playerId': player.id,
        'round': round_number,
        'position': position,
    })
    db.session.commit()

    _emit_queue(game.id, round_number)
    publish_event(event)
    return request


def approve_minute(game_id, player_id, round_number) -> MinuteRequest:
    game = get_game(game_id)
    round_number = parse_round(round_number)
    player = get_player(game, player_id)
    request = MinuteRequest.query.filter_by(game_id=game.id, round=round_number, player_id=player.id).first()
    if not request:
        raise NotFoundError('Minute request not found')

    request.approved = True
    event = record_event(game.id, 'MINUTE_APPROVED', {'playerId': player.id, 'round': round_number})
    db.session.commit()

    _emit_queue(game.id, round_number)
    publish_event(event)
    return request


def _parse_duration(value) -> Optional[int]:
    if value is None:
        return None
    try:
        duration = int(value)
    except (TypeError, ValueError):
        raise ValidationError('durationSec must be an integer')
    if duration <= 0:
        raise ValidationError('durationSec must be positive')
    return duration


def control_minute_timer(game_id, player_id, action, duration_sec=None) -> MinuteRequest:
    """Start, stop or reset a speaking timer.

    With a player the player's latest request is used, otherwise the most
    recently updated approved request. Start and reset restart the clock;
    stop only clears ``started_at``.
    """
    if action not in TIMER_ACTIONS:
        raise ValidationError(f'Unknown timer action: {action}')
    duration_sec = _parse_duration(duration_sec)
    game = get_game(game_id)

    if player_id is not None:
        player = get_player(game, player_id)
        request = (MinuteRequest.query
                   .filter_by(game_id=game.id, player_id=player.id)
                   .order_by(MinuteRequest.created_at.desc(), MinuteRequest.id.desc())
                   .first())
    else:
        request = (MinuteRequest.query
                   .filter_by(game_id=game.id, approved=True)
                   .order_by(MinuteRequest.updated_at.desc(), MinuteRequest.id.desc())
                   .first())
    if not request:
        raise NotFoundError('Minute request not found')

    now = utcnow()
    if action == 'stop':
        request.started_at = None
    else:
        # Only one speaker runs at a time
        others = MinuteRequest.query.filter(MinuteRequest.game_id == game.id,
                                            MinuteRequest.id != request.id,
                                            MinuteRequest.started_at.isnot(None)).all()
        for other in others:
            other.started_at = None
        request.started_at = now
        request.duration_sec = (duration_sec or request.duration_sec or game.lobby.minute_duration_sec
                                or int(current_app.config.get('DEFAULT_MINUTE_DURATION_SEC', 60)))
    request.updated_at = now

    event = record_event(game.id, 'MINUTE_TIMER', {
        'playerId': request.player_id,
        'action': action,
        'durationSec': request.duration_sec,
    })
    db.session.commit()

    current_app.logger.info(f"[minutes.timer] game={game.id} player={request.player_id} action={action} duration={request.duration_sec}")
    emit_to_game(game.id, 'minutes:timer', {
        'action': action,
        'playerId': request.player_id,
        'requestId': request.id,
        'startedAt': request.to_dict()['startedAt'],
        'durationSec': request.duration_sec,
        'remainingSec': remaining_seconds(request, now),
    })
    publish_event(event)
    return request
