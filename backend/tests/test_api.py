def _create(client, headers, game_id, **extra):
    body = {'game_id': game_id, 'name': 'Friday night'}
    body.update(extra)
    return client.post('/api/rooms/create', json=body, headers=headers)


def test_register_login_and_me(flask_app):
    client = flask_app.test_client()
    res = client.post('/api/auth/register', json={'email': 'dee@example.com', 'password': 'pw123456', 'name': 'Dee'})
    assert res.status_code == 201
    data = res.get_json()
    assert data['success'] is True
    assert data['user']['username'] == 'dee'
    token = data['token']

    fresh_client = flask_app.test_client()
    res = fresh_client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert res.status_code == 200
    assert res.get_json()['user']['email'] == 'dee@example.com'

    res = fresh_client.post('/api/auth/login', json={'email': 'dee@example.com', 'password': 'nope'})
    assert res.status_code == 401
    assert res.get_json()['code'] == 'InvalidLogin'

    res = fresh_client.post('/api/auth/login', json={'email': 'dee@example.com', 'password': 'pw123456'})
    assert res.status_code == 200
    assert res.get_json()['token']


def test_unauthenticated_requests_get_json_401(client, game):
    res = client.post('/api/rooms/create', json={'game_id': game.id})
    assert res.status_code == 401
    body = res.get_json()
    assert body['success'] is False
    assert body['error'] == 'unauthenticated'

    res = client.get('/api/auth/me', headers={'Authorization': 'Bearer forged'})
    assert res.status_code == 401


def test_create_room_validation(client, make_user, auth_headers, game):
    headers = auth_headers(make_user('Alice'))
    res = client.post('/api/rooms/create', json={'name': 'No game'}, headers=headers)
    assert res.status_code == 400
    assert res.get_json()['code'] == 'MissingField'

    res = _create(client, headers, game.id, max_players=50)
    assert res.status_code == 400
    assert res.get_json()['code'] == 'InvalidPlayerCount'

    res = _create(client, headers, 'missing')
    assert res.status_code == 404
    assert res.get_json()['error'] == 'not_found'


def test_join_fills_room_and_auto_starts(client, make_user, auth_headers, game):
    host, guest = make_user('Alice'), make_user('Bob')
    res = _create(client, auth_headers(host), game.id, max_players=2)
    assert res.status_code == 201
    room = res.get_json()['room']
    assert room['status'] == 'pending'
    assert room['name'] == 'Friday night'

    res = client.post(f"/api/rooms/join/{room['code'].lower()}", headers=auth_headers(guest))
    assert res.status_code == 200
    data = res.get_json()
    assert data['should_auto_start'] is True
    assert data['room']['status'] == 'active'
    assert data['room']['round'] == 1
    assert len(data['room']['questions']) == 3

    late = make_user('Cara')
    res = client.post(f"/api/rooms/join/{room['code']}", headers=auth_headers(late))
    assert res.status_code == 409
    assert res.get_json()['code'] == 'RoomFull'


def test_validate_room_code(client, make_user, auth_headers, game):
    room = _create(client, auth_headers(make_user('Alice')), game.id).get_json()['room']
    res = client.post(f"/api/rooms/validate/{room['code']}")
    assert res.status_code == 200
    assert res.get_json()['room']['id'] == room['id']

    res = client.post('/api/rooms/validate/ZZZZZZ')
    assert res.status_code == 400
    assert res.get_json() == {'success': False, 'message': 'Room not found'}

    res = client.post('/api/rooms/validate/ZZ')
    assert res.status_code == 400
    assert res.get_json()['code'] == 'InvalidRoomCode'


def test_game_flow_over_http(client, make_user, auth_headers, game):
    host, bob, cara = make_user('Alice'), make_user('Bob'), make_user('Cara')
    room = _create(client, auth_headers(host), game.id).get_json()['room']
    for guest in (bob, cara):
        client.post(f"/api/rooms/join/{room['code']}", headers=auth_headers(guest))
    rid = room['id']

    res = client.post(f'/api/rooms/{rid}/start', headers=auth_headers(bob))
    assert res.status_code == 403
    res = client.post(f'/api/rooms/{rid}/start', headers=auth_headers(host))
    assert res.get_json()['room']['status'] == 'active'

    res = client.post(f'/api/rooms/{rid}/set-player-turn', json={'player_id': host.id}, headers=auth_headers(host))
    started = res.get_json()['room']
    assert started['current_player_turn'] == host.id
    question_id = started['questions'][0]['id']

    res = client.post(f'/api/rooms/{rid}/vote', json={'question_id': question_id}, headers=auth_headers(host))
    assert res.status_code == 403
    assert res.get_json()['code'] == 'InvalidVoter'

    client.post(f'/api/rooms/{rid}/vote', json={'question_id': question_id}, headers=auth_headers(bob))
    res = client.post(f'/api/rooms/{rid}/vote', json={'question_id': question_id}, headers=auth_headers(cara))
    voted = res.get_json()
    assert voted['voting_complete'] is True
    assert voted['room']['current_question']['id'] == question_id

    res = client.post(f'/api/rooms/{rid}/answer', json={'answer': 'Guilty'}, headers=auth_headers(host))
    assert res.get_json()['room']['answers'][host.id]['answer'] == 'Guilty'

    res = client.post(f'/api/rooms/{rid}/next-turn', headers=auth_headers(bob))
    assert res.status_code == 403
    res = client.post(f'/api/rooms/{rid}/next-turn', headers=auth_headers(host))
    data = res.get_json()
    assert data['game_ended'] is False
    assert data['room']['round'] == 2
    assert data['room']['current_player_turn'] == bob.id
    assert data['room']['answers'] == {}


def test_leave_rejoin_and_delete(client, make_user, auth_headers, game):
    host, bob = make_user('Alice'), make_user('Bob')
    room = _create(client, auth_headers(host), game.id).get_json()['room']
    rid = room['id']
    client.post(f"/api/rooms/join/{room['code']}", headers=auth_headers(bob))

    res = client.post(f'/api/rooms/{rid}/leave', headers=auth_headers(host))
    assert res.get_json()['room']['host_id'] == bob.id
    res = client.post(f'/api/rooms/{rid}/rejoin', headers=auth_headers(host))
    players = res.get_json()['room']['players']
    assert [p['user_id'] for p in players] == [host.id, bob.id]
    assert all(p['is_active'] for p in players)

    res = client.delete(f'/api/rooms/{rid}', headers=auth_headers(host))
    assert res.status_code == 403
    res = client.delete(f'/api/rooms/{rid}', headers=auth_headers(bob))
    assert res.get_json()['room']['status'] == 'terminated'

    res = client.get(f'/api/rooms/{rid}', headers=auth_headers(host))
    assert res.get_json()['room']['status'] == 'terminated'
    res = client.get('/api/rooms/missing', headers=auth_headers(host))
    assert res.status_code == 404
    assert res.get_json()['code'] == 'RoomNotFound'


def test_my_rooms_and_sessions(client, make_user, auth_headers, game):
    host = make_user('Alice')
    headers = auth_headers(host)
    room = _create(client, headers, game.id).get_json()['room']

    rooms = client.get('/api/rooms/user/my-rooms', headers=headers).get_json()['rooms']
    assert [r['id'] for r in rooms] == [room['id']]
    assert rooms[0]['user_is_host'] is True

    sessions = client.get('/api/sessions', headers=headers).get_json()['sessions']
    assert [s['id'] for s in sessions] == [room['id']]


def test_games_catalog(client, game):
    games = client.get('/api/games').get_json()['games']
    assert len(games) == 5
    assert 'questions' not in games[0]

    res = client.get(f'/api/games/{game.id}')
    assert len(res.get_json()['game']['questions']) == 5
    assert client.get('/api/games/missing').status_code == 404

    by_category = client.get('/api/games/category/Dare').get_json()['games']
    assert [g['name'] for g in by_category] == ['Truth or Dare']


def test_friend_endpoints(client, make_user, auth_headers):
    alice, bob = make_user('Alice'), make_user('Bob')
    res = client.post('/api/friends/request', json={'user_id': bob.id}, headers=auth_headers(alice))
    assert res.status_code == 201
    friendship_id = res.get_json()['friendship']['id']

    res = client.post('/api/friends/request', json={'user_id': alice.id}, headers=auth_headers(bob))
    assert res.status_code == 409

    requests = client.get('/api/friends/requests', headers=auth_headers(bob)).get_json()['requests']
    assert [r['request_id'] for r in requests] == [friendship_id]

    res = client.post(f'/api/friends/accept/{friendship_id}', headers=auth_headers(bob))
    assert res.get_json()['friendship']['status'] == 'accepted'
    friends = client.get('/api/friends', headers=auth_headers(alice)).get_json()['friends']
    assert [f['id'] for f in friends] == [bob.id]

    res = client.delete(f'/api/friends/{friendship_id}', headers=auth_headers(alice))
    assert res.get_json() == {'success': True}


def test_each_request_resolves_its_own_bearer(client, make_user, auth_headers):
    alice, bob = make_user('Alice'), make_user('Bob')
    assert client.get('/api/auth/me', headers=auth_headers(alice)).get_json()['user']['id'] == alice.id
    assert client.get('/api/auth/me', headers=auth_headers(bob)).get_json()['user']['id'] == bob.id
    assert client.get('/api/auth/me').status_code == 401


def test_update_profile(client, make_user, auth_headers):
    alice, bob = make_user('Alice'), make_user('Bob')
    headers = auth_headers(alice)
    res = client.put('/api/auth/profile', json={
        'displayName': 'Ally', 'photoURL': 'https://img.example.com/a.png', 'about': 'Host of hosts',
    }, headers=headers)
    assert res.status_code == 200
    user = res.get_json()['user']
    assert (user['display_name'], user['username'], user['about']) == ('Ally', 'alice', 'Host of hosts')
    assert user['photo_url'] == 'https://img.example.com/a.png'

    # Blank names are ignored while an empty about clears it
    res = client.put('/api/auth/profile', json={'displayName': '', 'about': ''}, headers=headers)
    user = res.get_json()['user']
    assert (user['display_name'], user['about']) == ('Ally', '')

    res = client.put('/api/auth/profile', json={'username': bob.username}, headers=headers)
    assert res.status_code == 409
    assert res.get_json()['code'] == 'UsernameTaken'
    assert client.put('/api/auth/profile', json={'about': 'x'}).status_code == 401
