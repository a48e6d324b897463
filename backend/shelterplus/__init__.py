import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Integrations are app-scoped extensions so tests can swap them out
    from shelterplus.services.discord import DiscordClient
    from shelterplus.services.official_config import OfficialConfigService
    flask_app.extensions['discord'] = DiscordClient.from_config(flask_app.config, flask_app.logger)
    flask_app.extensions['official_config'] = OfficialConfigService(flask_app.config.get('OFFICIAL_CONFIG_JSON'), flask_app.logger)

    from shelterplus.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Import and register blueprints here
    from shelterplus.main import main
    flask_app.register_blueprint(main)

    from shelterplus.api.lobbies import lobbies
    from shelterplus.api.games import games
    from shelterplus.api.invites import invites
    flask_app.register_blueprint(lobbies, url_prefix='/lobbies')
    flask_app.register_blueprint(games, url_prefix='/games')
    flask_app.register_blueprint(invites, url_prefix='/invites')

    # Register Socket.IO event handlers
    from shelterplus.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Flask-Login user loader
    from shelterplus.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('reload-official-config')
    def reload_official_config_command():
        """Re-parses the official preset list."""
        presets = flask_app.extensions['official_config'].reload()
        print(f'Loaded {len(presets)} official presets')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(reload_official_config_command)

    return flask_app
