from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from shelterplus import db
from shelterplus.errors import ValidationError
from shelterplus.models import User
from shelterplus.services.games.projection import get_metrics

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the ShelterPlus API!'})

@main.route('/health')
def health():
    return jsonify({'status': 'ok'})

@main.route('/metrics')
def metrics():
    return jsonify(get_metrics())

@main.route('/config/official')
def official_config():
    return jsonify(current_app.extensions['official_config'].get_all())

@main.route('/auth/discord', methods=['POST'])
def login_with_discord():
    """Log a host in from a Discord OAuth access token obtained by the web app."""
    data = request.get_json(silent=True) or {}
    access_token = data.get('accessToken')
    if not access_token:
        raise ValidationError('accessToken is required')
    try:
        profile = current_app.extensions['discord'].fetch_current_user(access_token)
    except Exception as exc:
        current_app.logger.warning(f"[auth.discord] token lookup failed: {exc}")
        return jsonify({'error': 'Invalid Discord token'}), 401
    if not profile or not profile.get('id'):
        return jsonify({'error': 'Invalid Discord token'}), 401

    user = User.query.filter_by(discord_id=str(profile['id'])).first()
    username = profile.get('global_name') or profile.get('username') or str(profile['id'])
    if user is None:
        user = User(discord_id=str(profile['id']), username=username)
        db.session.add(user)
    else:
        user.username = username
    db.session.commit()
    login_user(user, remember=True)
    return jsonify({'user': user.to_dict()})

@main.route('/auth/me')
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})

@main.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})
