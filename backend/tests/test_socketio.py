def _names(packets):
    return [pkt['name'] for pkt in packets]


def _join(sio_client, game_id):
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    sio_client.get_received('/ws')  # flush
    sio_client.emit('game:join', {'gameId': game_id}, namespace='/ws')
    return sio_client.get_received('/ws')


def test_socket_connect_and_join(sio_client):
    assert sio_client.is_connected('/ws')
    received = _join(sio_client, 42)
    joined = [pkt for pkt in received if pkt['name'] == 'joined']
    assert joined
    assert joined[0]['args'][0] == {'room': 'game:42', 'gameId': '42'}


def test_join_without_game_id_reports_error(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('game:join', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert 'error' in _names(received)
    assert 'joined' not in _names(received)


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'t': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert received[0]['name'] == 'pong'
    assert received[0]['args'][0] == {'t': 1}


def test_room_receives_card_open(client, sio_client, started_game):
    game = started_game(players=2)
    _join(sio_client, game['id'])
    pid = game['players'][0]['id']
    client.post(f"/games/{game['id']}/char/open", json={'playerId': pid, 'category': 'Health', 'round': 1})

    received = sio_client.get_received('/ws')
    names = _names(received)
    assert 'char:open' in names
    assert 'events:append' in names
    assert 'spectator:state' in names
    opened = next(pkt for pkt in received if pkt['name'] == 'char:open')['args'][0]
    assert opened['playerId'] == pid
    assert opened['card']['category'] == 'Health'
    assert opened['auto'] is False


def test_round_start_broadcasts_auto_reveals(client, sio_client, started_game):
    game = started_game(players=3)
    _join(sio_client, game['id'])
    client.post(f"/games/{game['id']}/round/start", json={'round': 1})

    received = sio_client.get_received('/ws')
    changes = [pkt['args'][0] for pkt in received if pkt['name'] == 'round:change']
    assert changes == [{'round': 1, 'status': 'started'}]
    auto_opens = [pkt['args'][0] for pkt in received if pkt['name'] == 'char:open']
    assert len(auto_opens) == 3
    assert all(p['auto'] and p['card']['category'] == 'Profession' for p in auto_opens)


def test_other_rooms_do_not_receive_events(client, sio_client, started_game):
    first = started_game(players=2)
    second = started_game(players=2)
    _join(sio_client, first['id'])
    client.post(f"/games/{second['id']}/round/start", json={'round': 1})
    assert sio_client.get_received('/ws') == []


def test_leave_stops_delivery(client, sio_client, started_game):
    game = started_game(players=2)
    _join(sio_client, game['id'])
    sio_client.emit('game:leave', {'gameId': game['id']}, namespace='/ws')
    assert _names(sio_client.get_received('/ws')) == ['left']
    client.post(f"/games/{game['id']}/round/start", json={'round': 1})
    assert sio_client.get_received('/ws') == []


def test_vote_cast_emits_lifetime_stats(client, sio_client, started_game):
    game = started_game(players=2)
    a, b = (p['id'] for p in game['players'])
    _join(sio_client, game['id'])
    client.post(f"/games/{game['id']}/voting/cast", json={'round': 1, 'voterPlayerId': a, 'targetPlayerId': b})
    stats = [pkt['args'][0] for pkt in sio_client.get_received('/ws') if pkt['name'] == 'vote:stats']
    assert stats == [{'round': 1, 'votes': {str(b): 1}}]
