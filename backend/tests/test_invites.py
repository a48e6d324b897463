import re
from datetime import timedelta

from shelterplus import db
from shelterplus.models import Invite, GameAdmin, GameEvent, Player, Card, utcnow


def _invite(client, game_id, role):
    res = client.post(f"/games/{game_id}/invites", json={'role': role})
    assert res.status_code == 201
    return res.get_json()


def test_create_invite(client, started_game):
    game = started_game()
    invite = _invite(client, game['id'], 'CO_HOST')
    assert re.fullmatch(r'[0-9a-f]{8}', invite['code'])
    assert invite['usedByUserId'] is None
    assert client.post(f"/games/{game['id']}/invites", json={'role': 'HOST'}).status_code == 400


def test_co_host_accept_is_idempotent_for_same_user(client, started_game):
    game = started_game()
    code = _invite(client, game['id'], 'CO_HOST')['code']
    first = client.post(f'/invites/{code}/accept', json={'userId': 'u1'})
    second = client.post(f'/invites/{code}/accept', json={'userId': 'u1'})
    assert first.status_code == second.status_code == 200
    assert first.get_json() == second.get_json() == {'gameId': game['id'], 'role': 'CO_HOST'}

    admins = GameAdmin.query.filter_by(game_id=game['id'], user_id='u1').all()
    assert [a.role for a in admins] == ['CO_HOST']
    assert GameEvent.query.filter_by(game_id=game['id'], type='INVITE_ACCEPTED').count() == 1


def test_used_invite_rejects_other_users(client, started_game):
    game = started_game()
    code = _invite(client, game['id'], 'CO_HOST')['code']
    client.post(f'/invites/{code}/accept', json={'userId': 'u1'})
    res = client.post(f'/invites/{code}/accept', json={'userId': 'u2'})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Invite already used by another user'


def test_expired_invite(client, started_game):
    game = started_game()
    code = _invite(client, game['id'], 'CO_HOST')['code']
    invite = Invite.query.filter_by(code=code).one()
    invite.expires_at = utcnow() - timedelta(minutes=1)
    db.session.commit()
    res = client.post(f'/invites/{code}/accept', json={'userId': 'u1'})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Invite expired'


def test_unknown_code_and_missing_user(client, started_game):
    game = started_game()
    assert client.post('/invites/deadbeef/accept', json={'userId': 'u1'}).status_code == 404
    code = _invite(client, game['id'], 'CO_HOST')['code']
    assert client.post(f'/invites/{code}/accept', json={}).status_code == 400


def test_spectator_gets_player_without_cards(client, started_game):
    game = started_game(players=4)
    code = _invite(client, game['id'], 'SPECTATOR')['code']
    res = client.post(f'/invites/{code}/accept', json={'userId': 'fan-1', 'nickname': 'Watcher'})
    assert res.status_code == 200
    body = res.get_json()
    spectator = db.session.get(Player, body['playerId'])
    assert (spectator.number, spectator.nickname, spectator.role, spectator.status) == (1001, 'Watcher', 'SPECTATOR', 'ALIVE')
    assert Card.query.filter_by(player_id=spectator.id).count() == 0

    again = client.post(f'/invites/{code}/accept', json={'userId': 'fan-1'}).get_json()
    assert again['playerId'] == body['playerId']

    other = _invite(client, game['id'], 'SPECTATOR')['code']
    second = client.post(f'/invites/{other}/accept', json={'userId': 'fan-2'}).get_json()
    assert db.session.get(Player, second['playerId']).number == 1002

    public = client.get(f"/games/{game['id']}/public").get_json()
    roles = sorted(p['role'] for p in public['players'])
    assert roles.count('SPECTATOR') == 2


def test_spectator_invite_refused_when_disabled(client, started_game):
    game = started_game()
    code = _invite(client, game['id'], 'SPECTATOR')['code']
    client.post(f"/games/{game['id']}/spectators", json={'enabled': False})
    res = client.post(f'/invites/{code}/accept', json={'userId': 'fan-1'})
    assert res.status_code == 400
    assert Player.query.filter_by(game_id=game['id'], role='SPECTATOR').count() == 0
