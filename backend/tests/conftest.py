import os
import sys
import pytest

# Ensure the backend root (containing the `shelterplus` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from shelterplus import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = ['http://localhost:3000']
    DISCORD_BOT_TOKEN = ''
    DISCORD_API_BASE = 'https://discord.test/api'
    DISCORD_TIMEOUT_SEC = 1
    DISCORD_CHUNK_SIZE = 4
    OFFICIAL_CONFIG_JSON = None
    DEFAULT_MINUTE_DURATION_SEC = 60
    INVITE_TTL_MIN = 15


class FakeDiscord:
    """Records outgoing Discord calls instead of hitting the API."""

    def __init__(self):
        self.posts = []
        self.dms = []
        self.participants = []
        self.users = {}
        self.fail = False

    def post_to_channel(self, channel_id, content):
        if self.fail:
            raise RuntimeError('discord is down')
        self.posts.append((channel_id, content))

    def send_direct_message(self, discord_user_id, content):
        if self.fail:
            raise RuntimeError('discord is down')
        self.dms.append((discord_user_id, content))

    def fetch_voice_participants(self, guild_id, voice_channel_id):
        if self.fail:
            raise RuntimeError('discord is down')
        return list(self.participants)

    def fetch_current_user(self, access_token):
        if access_token not in self.users:
            raise RuntimeError('401 Unauthorized')
        return self.users[access_token]


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import shelterplus.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def discord_stub(flask_app):
    stub = FakeDiscord()
    flask_app.extensions['discord'] = stub
    return stub


@pytest.fixture()
def client(flask_app, discord_stub):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


def make_roster(count, with_discord=False):
    return [
        {
            'id': f'p{n}',
            'number': n,
            'nickname': f'Player {n}',
            'discordId': f'd{n}' if with_discord else None,
        }
        for n in range(1, count + 1)
    ]


@pytest.fixture()
def create_lobby(client):
    def _create(players=4, with_discord=False, **overrides):
        body = {
            'mode': 'WEB',
            'rounds': 5,
            'minuteDurationSec': 45,
            'enabledCategories': {},
        }
        body.update(overrides)
        res = client.post('/lobbies', json=body)
        assert res.status_code == 201, res.get_json()
        lobby = res.get_json()
        if players:
            res = client.patch(f"/lobbies/{lobby['id']}/collect",
                               json={'players': make_roster(players, with_discord)})
            assert res.status_code == 200
        return lobby
    return _create


@pytest.fixture()
def started_game(client, create_lobby):
    def _start(players=4, **overrides):
        lobby = create_lobby(players=players, **overrides)
        res = client.post(f"/games/{lobby['id']}/start", json={'hostUserId': 'host-1'})
        assert res.status_code == 201, res.get_json()
        return res.get_json()
    return _start
