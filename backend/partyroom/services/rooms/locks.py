import threading
from contextlib import contextmanager
from typing import Dict, Optional

from partyroom.errors import RoomBusy


class RoomSlot:
    """Per-room exclusion state plus the room's pending rotation, if any."""

    __slots__ = ('lock', 'rotation_token', 'rotation_deadline', 'holders', 'closed')

    def __init__(self):
        self.lock = threading.RLock()
        self.rotation_token: Optional[str] = None
        self.rotation_deadline: Optional[float] = None
        # Threads inside or waiting on ``exclusive``; guarded by the coordinator
        self.holders = 0
        self.closed = False

    def clear_rotation(self):
        self.rotation_token = None
        self.rotation_deadline = None


class RoomCoordinator:
    """Process-scoped registry of room slots.

    All read-modify-write cycles on a room happen inside ``exclusive``; the
    rotation timer takes the same lock before touching state, so a cancel
    and the next mutation are ordered.

    A slot marked ``closed`` is dropped once its last holder leaves and no
    rotation is pending. A later caller for the same room gets a new slot.
    """

    def __init__(self):
        self._slots: Dict[str, RoomSlot] = {}
        self._guard = threading.Lock()

    def __contains__(self, room_id) -> bool:
        with self._guard:
            return room_id in self._slots

    @contextmanager
    def exclusive(self, room_id: str, timeout: Optional[float] = None):
        with self._guard:
            slot = self._slots.get(room_id)
            if slot is None:
                slot = self._slots[room_id] = RoomSlot()
            slot.holders += 1
        try:
            acquired = slot.lock.acquire(timeout=timeout) if timeout is not None else slot.lock.acquire()
            if not acquired:
                raise RoomBusy()
            try:
                yield slot
            finally:
                slot.lock.release()
        finally:
            self._release(room_id, slot)

    def _release(self, room_id, slot):
        with self._guard:
            slot.holders -= 1
            if slot.closed and slot.holders == 0 and slot.rotation_token is None:
                if self._slots.get(room_id) is slot:
                    del self._slots[room_id]

    def pending_rotation(self, room_id: str) -> Optional[str]:
        with self._guard:
            slot = self._slots.get(room_id)
        return slot.rotation_token if slot else None

    def reset(self):
        with self._guard:
            self._slots.clear()


coordinator = RoomCoordinator()

# Serializes code allocation so two creates cannot claim the same free code
code_allocation_lock = threading.Lock()
