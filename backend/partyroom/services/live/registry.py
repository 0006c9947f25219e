import threading
from typing import Dict, Optional, Set


class ConnectionRegistry:
    """Maps live connections to users and rooms.

    Process-scoped: lost on restart, after which clients re-join and re-sync
    from the room store. A user has at most one tracked connection; a newer
    one replaces the tracking of the older without closing it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sid_by_user: Dict[str, str] = {}
        self._sids_by_room: Dict[str, Set[str]] = {}
        self._ctx_by_sid: Dict[str, dict] = {}

    def connect(self, sid: str, user_id: str, display_name: str) -> Optional[str]:
        """Track a new connection; returns the superseded sid, if any."""
        with self._lock:
            previous = self._sid_by_user.get(user_id)
            self._sid_by_user[user_id] = sid
            self._ctx_by_sid[sid] = {'user_id': user_id, 'display_name': display_name, 'rooms': set()}
            return previous if previous != sid else None

    def disconnect(self, sid: str) -> Set[str]:
        """Forget a connection; returns the room ids it was subscribed to."""
        with self._lock:
            ctx = self._ctx_by_sid.pop(sid, None)
            if not ctx:
                return set()
            if self._sid_by_user.get(ctx['user_id']) == sid:
                del self._sid_by_user[ctx['user_id']]
            for room_id in ctx['rooms']:
                self._discard(room_id, sid)
            return set(ctx['rooms'])

    def subscribe(self, sid: str, room_id: str) -> None:
        with self._lock:
            self._sids_by_room.setdefault(room_id, set()).add(sid)
            ctx = self._ctx_by_sid.get(sid)
            if ctx:
                ctx['rooms'].add(room_id)

    def unsubscribe(self, sid: str, room_id: str) -> None:
        with self._lock:
            self._discard(room_id, sid)
            ctx = self._ctx_by_sid.get(sid)
            if ctx:
                ctx['rooms'].discard(room_id)

    def _discard(self, room_id, sid):
        sids = self._sids_by_room.get(room_id)
        if sids is None:
            return
        sids.discard(sid)
        if not sids:
            del self._sids_by_room[room_id]

    def context(self, sid: str) -> Optional[dict]:
        with self._lock:
            ctx = self._ctx_by_sid.get(sid)
            return dict(ctx, rooms=set(ctx['rooms'])) if ctx else None

    def connection_for_user(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._sid_by_user.get(user_id)

    def connections_for_room(self, room_id: str) -> Set[str]:
        with self._lock:
            return set(self._sids_by_room.get(room_id, ()))

    def clear(self) -> None:
        with self._lock:
            self._sid_by_user.clear()
            self._sids_by_room.clear()
            self._ctx_by_sid.clear()


registry = ConnectionRegistry()
