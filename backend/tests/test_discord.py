import pytest

from shelterplus.models import GameAdmin, User
from shelterplus.services.discord import DiscordClient, DiscordError


class FakeResponse:
    def __init__(self, status_code=200, data=None):
        self.status_code = status_code
        self._data = data
        self.content = b'{}' if data is not None else b''
        self.text = str(data)

    def json(self):
        return self._data


class RecordingSession:
    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        self.calls.append((method, url, headers, kwargs))
        return self.routes.get((method, url), FakeResponse(404, {'message': 'Unknown'}))


def _client(routes):
    client = DiscordClient(token='bot-token', api_base='https://discord.test/api/')
    client.session = RecordingSession(routes)
    return client


def test_offline_client_sends_nothing():
    client = DiscordClient(token='')
    client.session = RecordingSession({})
    client.post_to_channel('c1', 'hello')
    client.send_direct_message('u1', 'hello')
    assert client.fetch_voice_participants('g1', 'v1') == []
    assert client.session.calls == []


def test_post_to_channel_uses_bot_auth():
    base = 'https://discord.test/api'
    client = _client({('POST', f'{base}/channels/c1/messages'): FakeResponse(200, {'id': 'm1'})})
    client.post_to_channel('c1', 'hello')
    method, url, headers, kwargs = client.session.calls[0]
    assert headers == {'Authorization': 'Bot bot-token'}
    assert kwargs['json'] == {'content': 'hello'}


def test_direct_message_opens_dm_channel_first():
    base = 'https://discord.test/api'
    client = _client({
        ('POST', f'{base}/users/@me/channels'): FakeResponse(200, {'id': 'dm-9'}),
        ('POST', f'{base}/channels/dm-9/messages'): FakeResponse(200, {'id': 'm1'}),
    })
    client.send_direct_message('u1', 'your cards')
    assert [url for _, url, _, _ in client.session.calls] == [
        f'{base}/users/@me/channels', f'{base}/channels/dm-9/messages',
    ]


def test_error_status_raises():
    client = _client({})
    with pytest.raises(DiscordError):
        client.post_to_channel('missing', 'hello')


def test_voice_participants_filters_by_channel():
    base = 'https://discord.test/api'
    members = [
        {'user': {'id': '1', 'username': 'alice'}, 'nick': '1 Alice'},
        {'user': {'id': '2', 'username': 'bob'}},
        {'user': {'id': '3', 'username': 'robot', 'bot': True}},
        {'user': {'id': '4', 'username': 'dana', 'global_name': 'Dana'}},
    ]
    client = _client({
        ('GET', f'{base}/guilds/g1/members'): FakeResponse(200, members),
        ('GET', f'{base}/guilds/g1/voice-states/1'): FakeResponse(200, {'channel_id': 'v1'}),
        ('GET', f'{base}/guilds/g1/voice-states/2'): FakeResponse(200, {'channel_id': 'other'}),
        ('GET', f'{base}/guilds/g1/voice-states/4'): FakeResponse(200, {'channel_id': 'v1'}),
    })
    assert client.fetch_voice_participants('g1', 'v1') == [
        {'id': '1', 'nickname': '1 Alice'},
        {'id': '4', 'nickname': 'Dana'},
    ]


def test_discord_login_and_host_assignment(client, discord_stub, create_lobby):
    discord_stub.users['good-token'] = {'id': '555', 'username': 'hosty'}
    assert client.get('/auth/me').status_code == 401
    assert client.post('/auth/discord', json={'accessToken': 'bad'}).status_code == 401
    assert client.post('/auth/discord', json={}).status_code == 400

    res = client.post('/auth/discord', json={'accessToken': 'good-token'})
    assert res.status_code == 200
    assert res.get_json()['user']['discordId'] == '555'
    assert User.query.filter_by(discord_id='555').count() == 1
    assert client.get('/auth/me').get_json()['user']['username'] == 'hosty'

    lobby = create_lobby(players=2)
    game = client.post(f"/games/{lobby['id']}/start", json={'hostUserId': 'ignored'}).get_json()
    admin = GameAdmin.query.filter_by(game_id=game['id']).one()
    assert admin.user_id == '555'

    assert client.post('/auth/logout').status_code == 200
    assert client.get('/auth/me').status_code == 401
