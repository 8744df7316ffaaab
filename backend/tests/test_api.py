def _add_players(admin_client, *names):
    ids = []
    for name in names:
        res = admin_client.post('/api/players', json={'name': name, 'avatar': '🎯'})
        assert res.status_code == 201
        ids.append(res.get_json()['player']['id'])
    return ids


def _create(admin_client, game_type, player_ids, **extra):
    res = admin_client.post('/api/games/create', json={'game_type': game_type, 'player_ids': player_ids, **extra})
    assert res.status_code == 201
    body = res.get_json()
    assert body['success'] is True
    return body['game']


def test_login_flow(client):
    assert client.post('/login', json={'username': 'admin'}).status_code == 400
    assert client.post('/login', json={'username': 'admin', 'password': 'nope'}).status_code == 401

    res = client.post('/login', json={'username': 'admin', 'password': 'admin-pass'})
    assert res.status_code == 200
    user = res.get_json()['user']
    assert user['role'] == 'admin'
    assert user['id'] == 'admin-1'

    assert client.get('/me').get_json()['user']['username'] == 'admin'
    assert client.post('/logout').status_code == 200
    assert client.get('/me').status_code == 401


def test_first_login_seeds_admin_into_roster(admin_client):
    roster = admin_client.get('/api/players').get_json()
    assert [(p['id'], p['avatar']) for p in roster] == [('admin-1', '👑')]


def test_reads_need_login_and_writes_need_admin(client, player_client):
    res = client.get('/api/games')
    assert res.status_code == 401
    assert res.get_json()['success'] is False

    # Roster is public
    assert client.get('/api/players').status_code == 200

    assert player_client.get('/api/games').status_code == 200
    res = player_client.post('/api/games/create', json={'game_type': 'ace', 'player_ids': []})
    assert res.status_code == 403
    assert res.get_json()['error'] == 'Admin access required'
    assert player_client.post('/api/players', json={'name': 'Sneaky'}).status_code == 403
    assert player_client.post('/users/add', json={'username': 'x', 'password': 'y'}).status_code == 403


def test_add_user_validation(admin_client):
    assert admin_client.post('/users/add', json={'username': 'sam'}).status_code == 400
    res = admin_client.post('/users/add', json={'username': 'sam', 'password': 'pw', 'name': 'Sam'})
    assert res.status_code == 201
    sam_id = res.get_json()['user']['id']
    assert admin_client.post('/users/add', json={'username': 'sam', 'password': 'pw'}).status_code == 400
    # Every login is also a roster player with the same id
    assert sam_id in [p['id'] for p in admin_client.get('/api/players').get_json()]


def test_rummy_game_over_http(admin_client):
    a, b, c, d = _add_players(admin_client, 'Alice', 'Bob', 'Cara', 'Dan')
    game = _create(admin_client, 'rummy', [a, b, c], max_points=100)
    assert game['title'] == 'Rummy Game 1'
    assert game['max_points'] == 100
    gid = game['id']

    res = admin_client.post(f'/api/games/{gid}/rounds', json={'scores': {a: 40, b: '110', c: 30}})
    assert res.status_code == 200
    body = res.get_json()
    assert body['persisted'] is True
    lost = {p['id']: p['is_lost'] for p in body['game']['players']}
    assert lost == {a: False, b: True, c: False}

    res = admin_client.post(f'/api/games/{gid}/players', json={'player_id': d})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Cannot add players after someone has reached max points!'

    res = admin_client.post(f'/api/games/{gid}/rounds', json={'scores': {a: 65, c: 74}})
    game = res.get_json()['game']
    assert game['status'] == 'completed'
    assert game['winner'] == c

    history = admin_client.get(f'/api/games/{gid}/history').get_json()
    assert [e['round_number'] for e in history] == [1, 2]

    res = admin_client.post(f'/api/games/{gid}/rounds', json={'scores': {a: 1}})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Game is already completed'

    board = admin_client.get('/api/games/leaderboard?variant=rummy').get_json()
    assert board['variant'] == 'rummy'
    assert board['players'][0]['id'] == c


def test_late_joiner_over_http(admin_client):
    a, b, c = _add_players(admin_client, 'Alice', 'Bob', 'Cara')
    gid = _create(admin_client, 'rummy', [a, b])['id']
    admin_client.post(f'/api/games/{gid}/rounds', json={'scores': {a: 30, b: 45}})

    res = admin_client.post(f'/api/games/{gid}/players', json={'player_id': c})
    assert res.status_code == 200
    totals = {p['id']: p['total_points'] for p in res.get_json()['game']['players']}
    assert totals[c] == 46

    history = admin_client.get(f'/api/games/{gid}/history').get_json()
    assert [e['kind'] for e in history] == ['round', 'player_added']

    res = admin_client.post(f'/api/games/{gid}/players', json={'player_id': c})
    assert res.get_json()['error'] == 'Player already in game'
    assert admin_client.post(f'/api/games/{gid}/players', json={}).status_code == 400


def test_ace_game_over_http(admin_client):
    a, b = _add_players(admin_client, 'Alice', 'Bob')
    gid = _create(admin_client, 'ace', [a, b])['id']

    res = admin_client.post(f'/api/games/{gid}/ace', json={'loser_id': a})
    assert res.status_code == 200
    totals = {p['id']: p['total_points'] for p in res.get_json()['game']['players']}
    assert totals == {a: 0, b: 1}

    assert admin_client.get(f'/api/games/{gid}/leaders').get_json() == {'winner_ids': [b]}
    assert admin_client.post(f'/api/games/{gid}/winners', json={'winner_ids': b}).status_code == 400

    res = admin_client.post(f'/api/games/{gid}/winners', json={'winner_ids': [b]})
    game = res.get_json()['game']
    assert game['status'] == 'completed'
    assert game['winners'] == [b]
    assert game['winner'] == b

    roster = {p['id']: p for p in admin_client.get('/api/players').get_json()}
    assert (roster[b]['wins'], roster[b]['total_games'], roster[b]['win_percentage']) == (1, 1, 100)
    assert (roster[a]['wins'], roster[a]['total_games']) == (0, 1)

    ranked = admin_client.get('/api/players/leaderboard').get_json()
    assert ranked[0]['id'] == b


def test_chess_game_over_http(admin_client):
    a, b, c = _add_players(admin_client, 'Alice', 'Bob', 'Cara')

    res = admin_client.post('/api/games/create', json={'game_type': 'chess', 'player_ids': [a, b, c]})
    assert res.status_code == 400

    gid = _create(admin_client, 'chess', [a, b])['id']
    assert admin_client.post(f'/api/games/{gid}/rounds', json={'scores': {a: 1}}).status_code == 400
    assert admin_client.get(f'/api/games/{gid}/leaders').status_code == 400

    res = admin_client.post(f'/api/games/{gid}/winner', json={'winner_id': a})
    assert res.status_code == 200
    assert res.get_json()['game']['winner'] == a


def test_create_rejects_bad_input(admin_client):
    a, b = _add_players(admin_client, 'Alice', 'Bob')
    assert admin_client.post('/api/games/create', json={'game_type': 'rummy', 'player_ids': [a]}).status_code == 400
    assert admin_client.post('/api/games/create', json={'game_type': 'golf', 'player_ids': [a, b]}).status_code == 400
    res = admin_client.post('/api/games/create', json={'game_type': 'rummy', 'player_ids': [a, b], 'max_points': -3})
    assert res.status_code == 400
    assert res.get_json()['success'] is False
    assert admin_client.get('/api/games').get_json() == []


def test_unknown_game_is_404(admin_client):
    a, = _add_players(admin_client, 'Alice')
    assert admin_client.get('/api/games/nope').status_code == 404
    assert admin_client.get('/api/games/nope/history').status_code == 404
    assert admin_client.post('/api/games/nope/rounds', json={'scores': {}}).status_code == 404
    assert admin_client.post('/api/games/nope/players', json={'player_id': a}).status_code == 404
    assert admin_client.post('/api/games/nope/winner', json={'winner_id': a}).status_code == 404


def test_listing_filters_and_recent(admin_client):
    a, b = _add_players(admin_client, 'Alice', 'Bob')
    first = _create(admin_client, 'rummy', [a, b])
    second = _create(admin_client, 'ace', [a, b])
    third = _create(admin_client, 'chess', [a, b])
    assert [g['title'] for g in (first, second, third)] == ['Rummy Game 1', 'Ace Game 2', 'Chess Game 3']

    listed = admin_client.get('/api/games').get_json()
    assert {g['id'] for g in listed} == {first['id'], second['id'], third['id']}

    only_ace = admin_client.get('/api/games?variant=ace').get_json()
    assert [g['id'] for g in only_ace] == [second['id']]
    assert admin_client.get('/api/games?variant=go').status_code == 400

    admin_client.post(f"/api/games/{third['id']}/winner", json={'winner_id': a})
    done = admin_client.get('/api/games?status=completed').get_json()
    assert [g['id'] for g in done] == [third['id']]

    assert len(admin_client.get('/api/games/recent').get_json()) == 3


def test_bulk_replace(admin_client):
    a, b = _add_players(admin_client, 'Alice', 'Bob')
    game = _create(admin_client, 'ace', [a, b])

    game['title'] = 'Renamed'
    res = admin_client.put('/api/games', json=[game])
    assert res.status_code == 200
    assert res.get_json()['count'] == 1
    assert admin_client.get(f"/api/games/{game['id']}").get_json()['title'] == 'Renamed'
    assert admin_client.put('/api/games', json={'not': 'a list'}).status_code == 400
    assert admin_client.put('/api/games', json=[{'variant': 'ace'}]).status_code == 400
    res = admin_client.put('/api/games', json=[1])
    assert res.status_code == 400
    assert res.get_json()['success'] is False

    roster = admin_client.get('/api/players').get_json()
    keep = [p for p in roster if p['id'] == a]
    res = admin_client.put('/api/players', json=keep)
    assert res.status_code == 200
    assert [p['id'] for p in admin_client.get('/api/players').get_json()] == [a]
