from flask import current_app, request
from flask_socketio import join_room, leave_room, emit
from shelterplus import socketio
from shelterplus.services.games.fanout import NAMESPACE, room_for


def _game_id(data):
    game_id = (data or {}).get('gameId')
    if game_id in (None, ''):
        emit('error', {'message': 'gameId is required'})
        return None
    return str(game_id)


def handle_connect():
    current_app.logger.info(f"[ws.connection] sid={request.sid}")
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(*args):
    current_app.logger.info(f"[ws.disconnect] sid={request.sid}")


def handle_join_game(data):
    game_id = _game_id(data)
    if game_id is None:
        return
    room = room_for(game_id)
    join_room(room)
    current_app.logger.debug(f"[ws.join] sid={request.sid} game={game_id}")
    emit('joined', {'room': room, 'gameId': game_id})


def handle_leave_game(data):
    game_id = _game_id(data)
    if game_id is None:
        return
    room = room_for(game_id)
    leave_room(room)
    current_app.logger.debug(f"[ws.leave] sid={request.sid} game={game_id}")
    emit('left', {'room': room, 'gameId': game_id})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = [NAMESPACE, '/'] if testing else [NAMESPACE]
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('game:join', handle_join_game, namespace=namespace)
        socketio.on_event('game:leave', handle_leave_game, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
