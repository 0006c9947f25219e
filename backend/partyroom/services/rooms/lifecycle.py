import json
import random
import string
from typing import NamedTuple

from flask import current_app

from partyroom.errors import (
    GameNotFound, InvalidPlayerCount, InvalidRoomCode, InvalidRoomName,
    NotARoomMember, NotRoomHost, PlayerNotInRoom, RoomClosed, RoomFull,
    RoomNotFound,
)
from partyroom.models import Room, RoomPlayer, utcnow
from partyroom.services.catalog.catalog import get_game
from partyroom.services.live.broadcast import emit_to_room
from . import store
from .locks import code_allocation_lock

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6


class JoinOutcome(NamedTuple):
    room: Room
    should_auto_start: bool


def generate_room_code(length=CODE_LENGTH):
    return ''.join(random.choices(CODE_ALPHABET, k=length))


def allocate_room_code():
    """Generate codes until one is free among open rooms.

    Caller must hold ``code_allocation_lock`` until the room is committed.
    """
    while True:
        code = generate_room_code()
        if not store.code_in_use(code):
            return code


def normalize_code(code) -> str:
    code = (code or '').strip().upper()
    if len(code) != CODE_LENGTH or not all(c in CODE_ALPHABET for c in code):
        raise InvalidRoomCode()
    return code


def _player_entry(user, is_host=False):
    return RoomPlayer(
        user_id=user.id,
        username=user.public_name,
        avatar=user.photo_url or '',
        is_host=is_host,
        is_active=True,
        joined_at=utcnow(),
    )


def _resolve_max_players(requested, game):
    cfg = current_app.config
    limit = int(cfg.get('MAX_PLAYERS_LIMIT', 20))
    if requested is None:
        requested = game.max_players or cfg.get('DEFAULT_MAX_PLAYERS', 10)
    try:
        value = int(requested)
    except (TypeError, ValueError):
        raise InvalidPlayerCount()
    if value < 2 or value > limit:
        raise InvalidPlayerCount(f'Max players must be between 2 and {limit}')
    return value


def create_room(host, game_id, max_players=None, name=None, selected_friends=None) -> Room:
    game = get_game(game_id)
    if game is None:
        raise GameNotFound()
    max_players = _resolve_max_players(max_players, game)
    name = (name or f"{host.public_name}'s room").strip()
    if not 3 <= len(name) <= 50:
        raise InvalidRoomName()

    with code_allocation_lock:
        room = Room(
            code=allocate_room_code(),
            name=name,
            host_id=host.id,
            host_name=host.public_name,
            game_id=game.id,
            game_name=game.name,
            max_players=max_players,
            status='pending',
            selected_friends=json.dumps(list(selected_friends or [])),
        )
        room.offered_questions = []
        room.players = [_player_entry(host, is_host=True)]
        store.save_room(room)

    current_app.logger.info(f"[room-create] room={room.id} code={room.code} host={host.id} game={game.id}")
    return room


def validate_room_code(code) -> dict:
    room = store.find_open_room_by_code(normalize_code(code))
    if room is None:
        return {'valid': False, 'message': 'Room not found', 'room': None}
    if len(room.active_players) >= room.max_players:
        return {'valid': False, 'message': 'Room is full', 'room': room}
    return {'valid': True, 'message': None, 'room': room}


def _activate(room, user):
    """Reactivate or append ``user``; returns True if the room changed."""
    player = room.find_player(user.id)
    if player is not None and player.is_active:
        return False
    if len(room.active_players) >= room.max_players:
        raise RoomFull()
    if player is not None:
        player.is_active = True
        player.left_at = None
        player.rejoined_at = utcnow()
    else:
        room.players.append(_player_entry(user))
    return True


def join_room(code, user) -> JoinOutcome:
    found = store.find_open_room_by_code(normalize_code(code))
    if found is None:
        raise RoomNotFound()
    with store.locked_room(found.id) as (room, _slot):
        if not room.is_open:
            raise RoomNotFound()
        changed = _activate(room, user)
        if changed:
            store.save_room(room)
            current_app.logger.info(f"[room-join] room={room.id} user={user.id} active={len(room.active_players)}")
            emit_to_room(room.id, 'player_joined', {
                'user_id': user.id,
                'username': user.public_name,
                'room': room.to_dict(),
                'is_full': len(room.active_players) >= room.max_players,
            })
        should_start = len(room.active_players) == room.max_players and room.status == 'pending'
        return JoinOutcome(room, should_start)


def rejoin_room(room_id, user) -> Room:
    with store.locked_room(room_id) as (room, _slot):
        if not room.is_open:
            raise RoomClosed()
        if _activate(room, user):
            store.save_room(room)
            current_app.logger.info(f"[room-rejoin] room={room.id} user={user.id}")
            emit_to_room(room.id, 'player_joined', {
                'user_id': user.id,
                'username': user.public_name,
                'room': room.to_dict(),
                'is_full': len(room.active_players) >= room.max_players,
            })
        return room


def _transfer_host(room, leaving_user_id):
    # Remaining active players are already in join order
    successor = next((p for p in room.active_players if p.user_id != leaving_user_id), None)
    if successor is None:
        return None
    for p in room.players:
        p.is_host = p.user_id == successor.user_id
    room.host_id = successor.user_id
    room.host_name = successor.username
    return successor


def leave_room(room_id, user_id) -> Room:
    from .scheduler import cancel_turn_rotation

    with store.locked_room(room_id) as (room, slot):
        player = room.find_player(user_id)
        if player is None:
            raise PlayerNotInRoom()
        if not player.is_active:
            return room
        player.is_active = False
        player.left_at = utcnow()

        new_host = None
        if room.host_id == user_id:
            new_host = _transfer_host(room, user_id)
        if not room.active_players:
            room.status = 'terminated'
            cancel_turn_rotation(slot)
        store.save_room(room)

        current_app.logger.info(f"[room-leave] room={room.id} user={user_id} status={room.status}")
        if new_host is not None:
            current_app.logger.info(f"[host-transfer] room={room.id} {user_id} -> {new_host.user_id}")
        emit_to_room(room.id, 'player_left', {
            'user_id': user_id,
            'username': player.username,
            'host_id': room.host_id,
            'room': room.to_dict(),
        })
        return room


def terminate_room(room_id, user_id) -> Room:
    from .scheduler import cancel_turn_rotation

    with store.locked_room(room_id) as (room, slot):
        if room.host_id != user_id:
            raise NotRoomHost('Only the host can delete this room')
        if room.status == 'terminated':
            return room
        room.status = 'terminated'
        cancel_turn_rotation(slot)
        store.save_room(room)
        current_app.logger.info(f"[room-terminate] room={room.id} by={user_id}")
        emit_to_room(room.id, 'room_terminated', {'room': room.to_dict()})
        return room


def get_user_rooms(user_id):
    """Rooms the user is or was part of, most recently updated first."""
    found = store.rooms_for_user(user_id)
    found.sort(key=lambda r: r.updated_at or r.created_at, reverse=True)
    rooms = []
    for room in found:
        player = room.find_player(user_id)
        data = room.to_dict()
        data['user_is_active'] = bool(player and player.is_active)
        data['user_is_host'] = room.host_id == user_id
        rooms.append(data)
    return rooms


def require_member(room, user_id, active=False):
    player = room.find_player(user_id)
    if player is None or (active and not player.is_active):
        raise NotARoomMember()
    return player


def require_host(room, user_id, message=None):
    if room.host_id != user_id:
        raise NotRoomHost(message)
