from flask import Blueprint, jsonify, request
from flask_login import current_user

from shelterplus.services.games import events, invites, lifecycle, minutes, projection, reveal, voting
from shelterplus.services.games.guards import get_game
from shelterplus.services.games.minutes import serialize_request


games = Blueprint('games', __name__)


def _body() -> dict:
    return request.get_json(silent=True) or {}


@games.route('/<int:lobby_id>/start', methods=['POST'])
def start_game(lobby_id):
    data = _body()
    host_user_id = current_user.discord_id if current_user.is_authenticated else data.get('hostUserId')
    game = lifecycle.start_from_lobby(lobby_id, host_user_id=host_user_id)
    return jsonify(game.to_dict()), 201


@games.route('/<int:game_id>', methods=['GET'])
def get_game_detail(game_id):
    return jsonify(get_game(game_id).to_dict())


@games.route('/<int:game_id>/state', methods=['GET'])
def get_game_state(game_id):
    return jsonify(projection.get_state(game_id))


@games.route('/<int:game_id>/public', methods=['GET'])
def get_public_state(game_id):
    return jsonify(projection.build_public_state(game_id))


@games.route('/<int:game_id>/events', methods=['GET'])
def list_events(game_id):
    args = request.args
    page = events.query_events(
        game_id,
        event_type=args.get('type'),
        player_id=args.get('playerId'),
        since=args.get('from'),
        until=args.get('to'),
        take=args.get('take'),
        cursor=args.get('cursor'),
    )
    return jsonify(page)


@games.route('/<int:game_id>/round/start', methods=['POST'])
def start_round(game_id):
    game = lifecycle.start_round(game_id, _body().get('round'))
    return jsonify(game.to_dict())


@games.route('/<int:game_id>/round/end', methods=['POST'])
def end_round(game_id):
    return jsonify(lifecycle.end_round(game_id, _body().get('round')))


@games.route('/<int:game_id>/char/preselect', methods=['POST'])
def preselect(game_id):
    data = _body()
    plan = reveal.preselect_categories(game_id, data.get('playerId'), data.get('round'), data.get('categories'))
    return jsonify(plan.to_dict())


@games.route('/<int:game_id>/char/open', methods=['POST'])
def open_card(game_id):
    data = _body()
    card = reveal.open_category(game_id, data.get('playerId'), data.get('category'), data.get('round'))
    return jsonify(card.to_dict())


@games.route('/<int:game_id>/minutes/enqueue', methods=['POST'])
def enqueue_minute(game_id):
    data = _body()
    request_row = minutes.enqueue_minute(game_id, data.get('round'), data.get('playerId'))
    return jsonify(serialize_request(request_row))


@games.route('/<int:game_id>/minutes/approve', methods=['POST'])
def approve_minute(game_id):
    data = _body()
    request_row = minutes.approve_minute(game_id, data.get('playerId'), data.get('round'))
    return jsonify(serialize_request(request_row))


@games.route('/<int:game_id>/minutes/<string:action>', methods=['POST'])
def control_minute(game_id, action):
    data = _body()
    request_row = minutes.control_minute_timer(game_id, data.get('playerId'), action, data.get('durationSec'))
    return jsonify(serialize_request(request_row))


@games.route('/<int:game_id>/voting/start', methods=['POST'])
def voting_start(game_id):
    return jsonify(voting.start_voting(game_id, _body().get('round')))


@games.route('/<int:game_id>/voting/stop', methods=['POST'])
def voting_stop(game_id):
    return jsonify(voting.stop_voting(game_id, _body().get('round')))


@games.route('/<int:game_id>/voting/revote', methods=['POST'])
def voting_revote(game_id):
    return jsonify(voting.revote(game_id, _body().get('round')))


@games.route('/<int:game_id>/voting/cast', methods=['POST'])
def voting_cast(game_id):
    data = _body()
    vote = voting.cast_vote(game_id, data.get('round'), data.get('voterPlayerId'),
                            data.get('targetPlayerId'), data.get('source') or 'WEB')
    return jsonify(vote.to_dict())


@games.route('/<int:game_id>/kick', methods=['POST'])
def kick(game_id):
    player = lifecycle.kick_player(game_id, _body().get('playerId'))
    return jsonify(player.to_dict(include_cards=False))


@games.route('/<int:game_id>/invites', methods=['POST'])
def create_invite(game_id):
    invite = invites.create_invite(game_id, _body().get('role'))
    return jsonify(invite.to_dict()), 201


@games.route('/<int:game_id>/spectators', methods=['POST'])
def toggle_spectators(game_id):
    game = lifecycle.set_spectators_enabled(game_id, _body().get('enabled', True))
    return jsonify({'gameId': game.id, 'isSpectatorsEnabled': game.is_spectators_enabled})


@games.route('/<int:game_id>/ending', methods=['POST'])
def trigger_ending(game_id):
    game = lifecycle.trigger_ending(game_id)
    return jsonify({'gameId': game.id, 'ending': game.ending})
