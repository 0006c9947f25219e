from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from partyroom import db
from partyroom.errors import RoomNotFound, StoreUnavailable
from partyroom.models import OPEN_STATUSES, Room, RoomPlayer, utcnow
from .locks import coordinator

HISTORY_STATUSES = ('pending', 'active', 'completed')


def get_room(room_id):
    if not room_id:
        return None
    return db.session.get(Room, room_id)


def require_room(room_id) -> Room:
    room = get_room(room_id)
    if room is None:
        raise RoomNotFound()
    return room


def find_open_room_by_code(code):
    return (
        Room.query.filter(Room.code == code, Room.status.in_(OPEN_STATUSES))
        .order_by(Room.created_at.desc())
        .first()
    )


def code_in_use(code) -> bool:
    return find_open_room_by_code(code) is not None


def rooms_with_status(statuses):
    return Room.query.filter(Room.status.in_(tuple(statuses)))


def rooms_for_user(user_id, statuses=HISTORY_STATUSES):
    """Rooms in ``statuses`` where the user has a player entry, active or not."""
    return (
        rooms_with_status(statuses)
        .join(RoomPlayer, RoomPlayer.room_id == Room.id)
        .filter(RoomPlayer.user_id == user_id)
        .all()
    )


def save_room(room: Room) -> Room:
    """Commit pending changes to ``room`` and read it back.

    Nothing is broadcast by callers unless this returns, so a failed write
    never reaches the live channel.
    """
    room.updated_at = utcnow()
    db.session.add(room)
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[store-error] room={room.id} {exc}")
        raise StoreUnavailable()
    db.session.refresh(room)
    return room


@contextmanager
def locked_room(room_id):
    """Enter the room's exclusive section and load its committed state."""
    timeout = current_app.config.get('ROOM_LOCK_TIMEOUT_SEC')
    with coordinator.exclusive(room_id, timeout=timeout) as slot:
        # Drop anything cached earlier in this session; reads must see the store
        db.session.expire_all()
        room = require_room(room_id)
        yield room, slot
        slot.closed = not room.is_open
