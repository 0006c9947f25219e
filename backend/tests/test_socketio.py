from partyroom.services.live.registry import registry
from partyroom.services.rooms import lifecycle, turns

from conftest import fresh, payloads


def _joined(sio_factory, user, room):
    """Connect ``user`` and subscribe it to ``room``, discarding the handshake traffic."""
    sio = sio_factory(user)
    sio.emit('join_room', {'room_id': room.id}, namespace='/ws')
    sio.get_received('/ws')
    return sio


def test_connect_requires_token(sio_factory):
    assert not sio_factory(token=None).is_connected('/ws')
    assert not sio_factory(token='forged').is_connected('/ws')


def test_connect_with_token(sio_factory, make_user):
    user = make_user('Alice')
    sio = sio_factory(user)
    assert sio.is_connected('/ws')
    connected = payloads(sio.get_received('/ws'), 'connected')
    assert connected[0]['user_id'] == user.id


def test_join_by_code_sends_room_state(sio_factory, make_user, make_room):
    host, bob = make_user('Alice'), make_user('Bob')
    room = make_room(host, bob)
    host_sio = _joined(sio_factory, host, room)

    bob_sio = sio_factory(bob)
    bob_sio.get_received('/ws')
    bob_sio.emit('join_room', {'room_code': room.code.lower()}, namespace='/ws')

    state = payloads(bob_sio.get_received('/ws'), 'room_state')
    assert state[0]['room']['id'] == room.id
    assert [p['user_id'] for p in state[0]['players']] == [host.id, bob.id]

    joined = payloads(host_sio.get_received('/ws'), 'player_joined')
    assert joined[0]['user_id'] == bob.id
    assert len(registry.connections_for_room(room.id)) == 2


def test_non_member_cannot_subscribe(sio_factory, make_user, make_room):
    host, stranger = make_user('Alice'), make_user('Zed')
    room = make_room(host)
    sio = sio_factory(stranger)
    sio.get_received('/ws')
    sio.emit('join_room', {'room_id': room.id}, namespace='/ws')

    received = sio.get_received('/ws')
    assert payloads(received, 'room_state') == []
    assert payloads(received, 'error')[0]['code'] == 'NotARoomMember'
    assert registry.connections_for_room(room.id) == set()


def test_errors_reach_only_the_sender(sio_factory, make_user, make_room):
    host, bob = make_user('Alice'), make_user('Bob')
    room = make_room(host, bob)
    host_sio = _joined(sio_factory, host, room)
    bob_sio = _joined(sio_factory, bob, room)
    host_sio.get_received('/ws')

    bob_sio.emit('set_question', {'room_id': room.id, 'question': {'id': 'q', 'text': 'Q'}}, namespace='/ws')
    errors = payloads(bob_sio.get_received('/ws'), 'error')
    assert errors[0]['code'] == 'NotRoomHost'
    assert errors[0]['error'] == 'forbidden'
    assert host_sio.get_received('/ws') == []


def test_missing_field_is_reported(sio_factory, make_user):
    sio = sio_factory(make_user('Alice'))
    sio.get_received('/ws')
    sio.emit('submit_vote', {'question_id': 'nhie1'}, namespace='/ws')
    assert payloads(sio.get_received('/ws'), 'error')[0]['code'] == 'MissingField'


def test_join_of_full_pending_room_starts_game(sio_factory, make_user, make_room):
    host, bob = make_user('Alice'), make_user('Bob')
    room = make_room(host, bob, max_players=2)
    assert room.status == 'pending'

    sio = sio_factory(bob)
    sio.get_received('/ws')
    sio.emit('join_room', {'room_id': room.id}, namespace='/ws')
    received = sio.get_received('/ws')

    assert payloads(received, 'game_started')[0]['round'] == 1
    assert payloads(received, 'room_state')[0]['room']['status'] == 'active'
    assert fresh(room.id).status == 'active'


def test_vote_and_answer_broadcasts(sio_factory, make_user, make_room):
    host, bob = make_user('Alice'), make_user('Bob')
    room = make_room(host, bob)
    turns.start_room(room.id)
    turns.set_player_turn(room.id, host.id, host.id)
    room = fresh(room.id)
    question_id = room.offered_questions[0]['id']

    host_sio = _joined(sio_factory, host, room)
    bob_sio = _joined(sio_factory, bob, room)
    host_sio.get_received('/ws')

    bob_sio.emit('submit_vote', {'room_id': room.id, 'question_id': question_id}, namespace='/ws')
    received = host_sio.get_received('/ws')
    update = payloads(received, 'vote_update')[0]
    assert update['vote_counts'] == {question_id: 1}
    assert update['voting_complete'] is True
    selected = payloads(received, 'question_selected')[0]
    assert selected['question']['id'] == question_id
    assert selected['countdown'] == 60
    bob_sio.get_received('/ws')

    host_sio.emit('submit_answer', {'room_id': room.id, 'answer': 'Yes'}, namespace='/ws')
    received = bob_sio.get_received('/ws')
    submitted = payloads(received, 'answer_submitted')[0]
    assert submitted['answer'] == 'Yes'
    assert submitted['question_id'] == question_id
    assert payloads(received, 'viewer_countdown_start')[0]['duration'] == 0


def test_next_turn_is_host_only(sio_factory, make_user, make_room):
    host, bob = make_user('Alice'), make_user('Bob')
    room = make_room(host, bob)
    turns.start_room(room.id)
    host_sio = _joined(sio_factory, host, room)
    bob_sio = _joined(sio_factory, bob, room)
    host_sio.get_received('/ws')

    bob_sio.emit('next_turn', {'room_id': room.id}, namespace='/ws')
    assert payloads(bob_sio.get_received('/ws'), 'error')[0]['code'] == 'NotRoomHost'

    host_sio.emit('next_turn', {'room_id': room.id}, namespace='/ws')
    rotated = payloads(bob_sio.get_received('/ws'), 'turn_rotated')
    assert rotated[0]['round'] == 2


def test_leaving_room_channel_and_room(sio_factory, make_user, make_room):
    host, bob = make_user('Alice'), make_user('Bob')
    room = make_room(host, bob)
    host_sio = _joined(sio_factory, host, room)
    bob_sio = _joined(sio_factory, bob, room)
    host_sio.get_received('/ws')

    bob_sio.emit('leave_room', {'room_id': room.id}, namespace='/ws')
    assert payloads(bob_sio.get_received('/ws'), 'left') == [{'room_id': room.id}]
    assert payloads(host_sio.get_received('/ws'), 'player_left')[0]['user_id'] == bob.id

    # Leaving the room itself is broadcast to those still subscribed
    lifecycle.leave_room(room.id, host.id)
    assert bob_sio.get_received('/ws') == []
    assert len(registry.connections_for_room(room.id)) == 1


def test_ping(sio_factory, make_user):
    sio = sio_factory(make_user('Alice'))
    sio.get_received('/ws')
    sio.emit('ping', {'at': 1}, namespace='/ws')
    assert payloads(sio.get_received('/ws'), 'pong') == [{'at': 1}]


def test_newest_connection_is_tracked(sio_factory, make_user):
    user = make_user('Alice')
    first = sio_factory(user)
    second = sio_factory(user)
    assert first.is_connected('/ws') and second.is_connected('/ws')
    # The older connection stays open but no longer owns the user's tracking
    first.disconnect(namespace='/ws')
    assert registry.connection_for_user(user.id) is not None
    second.disconnect(namespace='/ws')
    assert registry.connection_for_user(user.id) is None


def test_non_member_cannot_announce_leaving(sio_factory, make_user, make_room):
    host, stranger = make_user('Alice'), make_user('Zed')
    room = make_room(host)
    host_sio = _joined(sio_factory, host, room)
    sio = sio_factory(stranger)
    sio.get_received('/ws')

    sio.emit('leave_room', {'room_id': room.id}, namespace='/ws')
    received = sio.get_received('/ws')
    assert payloads(received, 'left') == []
    assert payloads(received, 'error')[0]['code'] == 'NotARoomMember'
    assert payloads(host_sio.get_received('/ws'), 'player_left') == []

    sio.emit('leave_room', {'room_id': 'missing'}, namespace='/ws')
    assert payloads(sio.get_received('/ws'), 'error')[0]['code'] == 'RoomNotFound'
