import secrets
from datetime import timedelta

from flask import current_app

from shelterplus import db
from shelterplus.errors import NotFoundError, ValidationError
from shelterplus.models import Invite, GameAdmin, Player, utcnow
from .fanout import record_event, publish_event, broadcast_public_state
from .guards import get_game

INVITE_ROLES = ('CO_HOST', 'SPECTATOR')
SPECTATOR_NUMBER_OFFSET = 1000


def generate_invite_code() -> str:
    """Generate an unused 8-hex-character invite code."""
    while True:
        code = secrets.token_hex(4)
        if not Invite.query.filter_by(code=code).first():
            return code


def create_invite(game_id, role) -> Invite:
    if role not in INVITE_ROLES:
        raise ValidationError(f'Unsupported invite role: {role}')
    game = get_game(game_id)
    ttl = int(current_app.config.get('INVITE_TTL_MIN', 15))
    invite = Invite(game_id=game.id, code=generate_invite_code(), role=role,
                    expires_at=utcnow() + timedelta(minutes=ttl))
    db.session.add(invite)
    event = record_event(game.id, 'INVITE_CREATED', {'role': role, 'code': invite.code})
    db.session.commit()
    publish_event(event)
    return invite


def accept_invite(code, user_id, nickname=None) -> dict:
    """Redeem an invite for one user.

    The same user may accept again and gets the same result; anyone else is
    rejected once the invite is used.
    """
    if not user_id:
        raise ValidationError('userId is required')
    user_id = str(user_id)
    invite = Invite.query.filter_by(code=code).first()
    if not invite:
        raise NotFoundError('Invite not found')
    if invite.expires_at < utcnow():
        raise ValidationError('Invite expired')
    if invite.used_by_user_id and invite.used_by_user_id != user_id:
        raise ValidationError('Invite already used by another user')
    first_use = invite.used_by_user_id is None

    game = get_game(invite.game_id)
    result = {'gameId': game.id, 'role': invite.role}
    if invite.role == 'CO_HOST':
        admin = GameAdmin.query.filter_by(game_id=game.id, user_id=user_id).first()
        if admin is None:
            admin = GameAdmin(game_id=game.id, user_id=user_id, role='CO_HOST')
            db.session.add(admin)
        else:
            admin.role = 'CO_HOST'
    elif invite.role == 'SPECTATOR':
        if not game.is_spectators_enabled:
            raise ValidationError('Spectators are disabled for this game')
        spectator = Player.query.filter_by(game_id=game.id, discord_id=user_id, role='SPECTATOR').first()
        if spectator is None:
            count = Player.query.filter_by(game_id=game.id, role='SPECTATOR').count()
            spectator = Player(game_id=game.id, number=SPECTATOR_NUMBER_OFFSET + count + 1,
                               nickname=nickname or 'Spectator', discord_id=user_id,
                               status='ALIVE', role='SPECTATOR')
            db.session.add(spectator)
            db.session.flush()
        result['playerId'] = spectator.id
    else:
        raise ValidationError(f'Unsupported invite role: {invite.role}')

    invite.used_by_user_id = user_id
    event = None
    if first_use:
        event = record_event(game.id, 'INVITE_ACCEPTED', {
            'role': invite.role,
            'userId': user_id,
            'playerId': result.get('playerId'),
        })
    db.session.commit()

    current_app.logger.info(f"[invite.accept] game={game.id} role={invite.role} user={user_id} first_use={first_use}")
    if event is not None:
        publish_event(event)
        if invite.role == 'SPECTATOR':
            broadcast_public_state(game.id)
    return result
