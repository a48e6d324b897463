from flask import Blueprint, jsonify, request
from flask_login import current_user

from shelterplus.services.games.invites import accept_invite

invites = Blueprint('invites', __name__)


@invites.route('/<string:code>/accept', methods=['POST'])
def accept(code):
    data = request.get_json(silent=True) or {}
    user_id = data.get('userId')
    if not user_id and current_user.is_authenticated:
        user_id = current_user.discord_id
    return jsonify(accept_invite(code, user_id, data.get('nickname')))
