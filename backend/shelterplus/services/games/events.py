from datetime import datetime, timezone

from sqlalchemy import or_, and_

from shelterplus import db
from shelterplus.errors import NotFoundError, ValidationError
from shelterplus.models import GameEvent
from .guards import get_game

DEFAULT_TAKE = 20
MAX_TAKE = 100
EVENT_BATCH_SIZE = 100


def _parse_time(value, name):
    if value in (None, ''):
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError(f'{name} must be an ISO-8601 timestamp')
    if parsed.tzinfo is not None:
        # Stored timestamps are naive UTC
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def query_events(game_id, event_type=None, player_id=None, since=None, until=None, take=None, cursor=None) -> dict:
    """Newest-first page of a game's event log.

    ``cursor`` is the id of the last event of the previous page; the page
    continues strictly after it.
    """
    game = get_game(game_id)
    try:
        take = int(take) if take is not None else DEFAULT_TAKE
    except (TypeError, ValueError):
        raise ValidationError('take must be an integer')
    take = max(1, min(take, MAX_TAKE))

    query = GameEvent.query.filter(GameEvent.game_id == game.id)
    if event_type:
        query = query.filter(GameEvent.type == event_type)
    since = _parse_time(since, 'from')
    until = _parse_time(until, 'to')
    if since:
        query = query.filter(GameEvent.created_at >= since)
    if until:
        query = query.filter(GameEvent.created_at <= until)

    if cursor is not None:
        anchor = db.session.get(GameEvent, _as_int(cursor))
        if not anchor or anchor.game_id != game.id:
            raise NotFoundError('Cursor event not found')
        query = query.filter(or_(
            GameEvent.created_at < anchor.created_at,
            and_(GameEvent.created_at == anchor.created_at, GameEvent.id < anchor.id),
        ))

    query = query.order_by(GameEvent.created_at.desc(), GameEvent.id.desc())
    if player_id is not None:
        # Events carry the player under different keys depending on type
        player_id = _as_int(player_id)
        page = []
        for event in query.yield_per(EVENT_BATCH_SIZE):
            if _mentions_player(event.payload, player_id):
                page.append(event)
                if len(page) > take:
                    break
    else:
        page = query.limit(take + 1).all()

    has_more = len(page) > take
    page = page[:take]
    return {
        'items': [e.to_dict() for e in page],
        'nextCursor': page[-1].id if has_more and page else None,
    }


def _mentions_player(payload, player_id: int) -> bool:
    payload = payload or {}
    for key in ('playerId', 'voterPlayerId', 'targetPlayerId'):
        if payload.get(key) == player_id:
            return True
    return player_id in (payload.get('playerIds') or [])


def _as_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid id: {value}')
