from flask import Blueprint, jsonify, request

from shelterplus.services import lobbies as lobby_service
from shelterplus.services.games.guards import get_lobby

lobbies = Blueprint('lobbies', __name__)


@lobbies.route('', methods=['POST'])
def create_lobby():
    data = request.get_json(silent=True) or {}
    lobby = lobby_service.create_lobby(data)
    return jsonify(lobby.to_dict()), 201


@lobbies.route('/<int:lobby_id>', methods=['GET'])
def get_lobby_state(lobby_id):
    return jsonify(get_lobby(lobby_id).to_dict())


@lobbies.route('/<int:lobby_id>/collect', methods=['POST'])
def collect_players(lobby_id):
    players = lobby_service.collect_players(lobby_id)
    return jsonify({'players': [p.to_dict() for p in players]})


@lobbies.route('/<int:lobby_id>/collect', methods=['PATCH'])
def update_players(lobby_id):
    data = request.get_json(silent=True) or {}
    players = lobby_service.update_players(lobby_id, data.get('players'))
    return jsonify({'players': [p.to_dict() for p in players]})
