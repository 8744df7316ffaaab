def test_socket_connect_and_join(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'connected' for pkt in received)

    sio_client.emit('join_game', {'game_id': 'abc123'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    joined = [pkt for pkt in received if pkt['name'] == 'joined']
    assert joined and joined[0]['args'][0] == {'room': 'game:abc123'}


def test_join_without_game_id_reports_error(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('join_game', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert [pkt['name'] for pkt in received] == ['error']


def test_ping_pong(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert received[0]['name'] == 'pong'
    assert received[0]['args'][0] == {'n': 1}


def test_round_pushes_state_to_game_room(admin_client, sio_client):
    ids = []
    for name in ('Alice', 'Bob'):
        ids.append(admin_client.post('/api/players', json={'name': name}).get_json()['player']['id'])
    gid = admin_client.post('/api/games/create', json={'game_type': 'ace', 'player_ids': ids}).get_json()['game']['id']

    sio_client.emit('join_game', {'game_id': gid}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    res = admin_client.post(f'/api/games/{gid}/ace', json={'loser_id': ids[0]})
    assert res.status_code == 200

    events = sio_client.get_received('/ws')
    names = [e['name'] for e in events]
    assert 'state_update' in names
    assert 'games_changed' in names
    update = next(e for e in events if e['name'] == 'state_update')
    assert update['args'][0] == {'game_id': gid}


def test_left_room_gets_no_state_updates(admin_client, sio_client):
    ids = []
    for name in ('Alice', 'Bob'):
        ids.append(admin_client.post('/api/players', json={'name': name}).get_json()['player']['id'])
    gid = admin_client.post('/api/games/create', json={'game_type': 'ace', 'player_ids': ids}).get_json()['game']['id']

    sio_client.emit('join_game', {'game_id': gid}, namespace='/ws')
    sio_client.emit('leave_game', {'game_id': gid}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    admin_client.post(f'/api/games/{gid}/rounds', json={'scores': {ids[0]: 2}})
    names = [e['name'] for e in sio_client.get_received('/ws')]
    assert 'state_update' not in names
    assert 'games_changed' in names
