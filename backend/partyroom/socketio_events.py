from functools import wraps

from flask import current_app, request
from flask_socketio import ConnectionRefusedError, emit, join_room, leave_room

from partyroom import socketio
from partyroom.errors import InvalidCredential, MissingField, PartyRoomError, RoomNotFound
from partyroom.services.accounts.identity import bearer_token, verify_token
from partyroom.services.accounts.profiles import get_user
from partyroom.services.live.broadcast import NAMESPACE, room_channel, room_state
from partyroom.services.live.registry import registry
from partyroom.services.rooms import store, turns, voting
from partyroom.services.rooms.lifecycle import normalize_code, require_member


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _require(data, key):
    value = (data or {}).get(key)
    if value in (None, ''):
        raise MissingField(f'{key} is required')
    return value


def _current_user():
    """User bound to this connection at handshake; the token is not re-checked."""
    ctx = registry.context(_get_sid())
    user = get_user(ctx['user_id']) if ctx else None
    if user is None:
        raise InvalidCredential('Connection is not authenticated')
    return user


def live_event(handler):
    """Report failures as an ``error`` event to the sending connection only."""
    @wraps(handler)
    def wrapper(data=None):
        try:
            return handler(data or {})
        except PartyRoomError as exc:
            current_app.logger.warning(
                f"[ws-error] sid={_get_sid()} event={handler.__name__} {type(exc).__name__}: {exc.message}"
            )
            emit('error', exc.to_dict())
        except Exception:
            current_app.logger.exception(f"[ws-error] sid={_get_sid()} event={handler.__name__} unexpected failure")
            emit('error', {'success': False, 'error': 'internal', 'code': 'InternalError', 'message': 'Unexpected error'})
    return wrapper


def handle_connect(auth=None):
    token = auth.get('token') if isinstance(auth, dict) else None
    token = token or bearer_token(request.headers.get('Authorization'))
    try:
        identity = verify_token(token)
        user = get_user(identity.external_id)
        if user is None:
            raise InvalidCredential('User not found')
    except InvalidCredential as exc:
        current_app.logger.info(f"[ws-refused] sid={_get_sid()} {exc.message}")
        raise ConnectionRefusedError(f'Authentication error: {exc.message}')

    superseded = registry.connect(_get_sid(), user.id, user.public_name)
    current_app.logger.info(f"[ws-connect] sid={_get_sid()} user={user.id} superseded={superseded or '-'}")
    emit('connected', {'message': 'Connected to /ws', 'user_id': user.id})


def handle_disconnect(reason=None):
    rooms = registry.disconnect(_get_sid())
    current_app.logger.info(f"[ws-disconnect] sid={_get_sid()} rooms={sorted(rooms)} reason={reason}")


@live_event
def handle_join_room(data):
    user = _current_user()
    if data.get('room_id'):
        room = store.require_room(data['room_id'])
    else:
        room = store.find_open_room_by_code(normalize_code(_require(data, 'room_code')))
        if room is None:
            raise RoomNotFound()
    require_member(room, user.id)

    channel = room_channel(room.id)
    join_room(channel)
    registry.subscribe(_get_sid(), room.id)
    current_app.logger.info(f"[ws-join] sid={_get_sid()} user={user.id} room={room.id}")

    is_full = len(room.active_players) >= room.max_players
    emit('player_joined', {
        'user_id': user.id,
        'username': user.public_name,
        'room': room.to_dict(),
        'is_full': is_full,
    }, to=channel, include_self=False)

    # Backup for clients that joined over HTTP without triggering the start
    if is_full and room.status == 'pending':
        turns.start_room(room.id)

    emit('room_state', room_state(store.require_room(room.id)))


@live_event
def handle_leave_room(data):
    user = _current_user()
    room_id = _require(data, 'room_id')
    require_member(store.require_room(room_id), user.id)
    channel = room_channel(room_id)
    leave_room(channel)
    registry.unsubscribe(_get_sid(), room_id)
    emit('player_left', {'user_id': user.id, 'username': user.public_name}, to=channel)
    emit('left', {'room_id': room_id})


@live_event
def handle_submit_answer(data):
    voting.submit_answer(_require(data, 'room_id'), _current_user(), data.get('answer'), data.get('question_id'))


@live_event
def handle_share_answer(data):
    voting.share_answer(_require(data, 'room_id'), _current_user(), data.get('answer'))


@live_event
def handle_submit_vote(data):
    voting.submit_vote(_require(data, 'room_id'), _current_user(), _require(data, 'question_id'))


@live_event
def handle_set_question(data):
    turns.set_current_question(_require(data, 'room_id'), _current_user().id, _require(data, 'question'))


@live_event
def handle_set_player_turn(data):
    turns.set_player_turn(_require(data, 'room_id'), _current_user().id, _require(data, 'player_id'))


@live_event
def handle_next_turn(data):
    turns.rotate_player_turn(_require(data, 'room_id'), acting_user_id=_current_user().id)


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('join_room', handle_join_room, namespace=NAMESPACE)
    socketio.on_event('leave_room', handle_leave_room, namespace=NAMESPACE)
    socketio.on_event('submit_answer', handle_submit_answer, namespace=NAMESPACE)
    socketio.on_event('share_answer', handle_share_answer, namespace=NAMESPACE)
    socketio.on_event('submit_vote', handle_submit_vote, namespace=NAMESPACE)
    socketio.on_event('set_question', handle_set_question, namespace=NAMESPACE)
    socketio.on_event('set_player_turn', handle_set_player_turn, namespace=NAMESPACE)
    socketio.on_event('next_turn', handle_next_turn, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
