"""Event log writes and best-effort side channels (Socket.IO rooms, Discord).

Everything here that talks to the outside world catches and logs its own
failures so a mutation that already committed is never undone or reported as
failed because a notification did not go out.
"""

import json
from typing import Any, Optional

from flask import current_app

from shelterplus import db, socketio
from shelterplus.models import GameEvent

NAMESPACE = '/ws'


def room_for(game_id) -> str:
    return f"game:{game_id}"


def record_event(game_id: int, event_type: str, payload: Optional[dict] = None) -> GameEvent:
    """Stage a GameEvent in the current session; the caller commits."""
    event = GameEvent(game_id=game_id, type=event_type, payload=payload or {})
    db.session.add(event)
    return event


def emit_to_game(game_id: int, event: str, payload: Any) -> None:
    if getattr(socketio, 'server', None) is None:
        current_app.logger.debug(f"[ws.emit.skipped] game={game_id} event={event} socket server not ready")
        return
    try:
        size = len(json.dumps(payload, default=str))
    except (TypeError, ValueError):
        size = None
    current_app.logger.debug(f"[ws.emit] game={game_id} event={event} size={size}")
    try:
        socketio.emit(event, payload, to=room_for(game_id), namespace=NAMESPACE)
    except Exception:
        current_app.logger.exception(f"[ws.emit.failed] game={game_id} event={event}")


def publish_event(event: GameEvent) -> None:
    """Push an already committed event to the room's live log."""
    emit_to_game(event.game_id, 'events:append', event.to_dict())


def broadcast_public_state(game_id: int) -> None:
    from .projection import build_public_state
    try:
        state = build_public_state(game_id, enforce_spectators=False)
    except Exception:
        current_app.logger.exception(f"[ws.public-state.failed] game={game_id}")
        return
    emit_to_game(game_id, 'spectator:state', state)


def discord():
    return current_app.extensions['discord']


def post_to_channel(channel_id: Optional[str], content: str) -> bool:
    if not channel_id:
        return False
    try:
        discord().post_to_channel(channel_id, content)
        return True
    except Exception as exc:
        current_app.logger.warning(f"[discord.post.failed] channel={channel_id} error={exc}")
        return False


def send_direct_message(discord_user_id: Optional[str], content: str) -> bool:
    if not discord_user_id:
        return False
    try:
        discord().send_direct_message(discord_user_id, content)
        return True
    except Exception as exc:
        current_app.logger.warning(f"[discord.dm.failed] target={discord_user_id} error={exc}")
        return False
