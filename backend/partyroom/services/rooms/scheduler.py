import time
import uuid

from partyroom import socketio
from partyroom.errors import PartyRoomError
from . import store


def cancel_turn_rotation(slot) -> None:
    """Drop the room's pending rotation. Call inside the room's exclusive section."""
    slot.clear_rotation()


def schedule_turn_rotation(app, room_id: str, slot) -> str:
    """Rotate the turn ``ANSWER_GRACE_SEC`` from now, superseding any pending rotation.

    - Call inside the room's exclusive section (``slot`` is that room's slot)
    - At most one rotation per room: the newest token wins, older workers abort
    - In TESTING no worker is started unless ENABLE_SCHEDULER_IN_TESTS, which
      runs it inline
    """
    delay = int(app.config.get('ANSWER_GRACE_SEC', 20))
    token = uuid.uuid4().hex
    superseded = slot.rotation_token
    slot.rotation_token = token
    slot.rotation_deadline = time.time() + delay
    app.logger.info(
        f"[timer-set] room={room_id} delay={delay}s deadline={slot.rotation_deadline:.0f} superseded={superseded or '-'}"
    )

    if app.config.get('TESTING'):
        if app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
            if delay:
                socketio.sleep(delay)
            _fire(app, room_id, token)
        return token

    socketio.start_background_task(_worker, app, room_id, token, delay)
    return token


def _worker(app, room_id: str, token: str, delay: int):
    socketio.sleep(delay)
    with app.app_context():
        _fire(app, room_id, token)


def _fire(app, room_id, token):
    try:
        run_scheduled_rotation(room_id, token)
    except PartyRoomError as exc:
        app.logger.warning(f"[timer-error] room={room_id} {type(exc).__name__}: {exc.message}")


def run_scheduled_rotation(room_id: str, token: str) -> bool:
    """Rotate the room's turn if ``token`` is still its pending rotation."""
    from flask import current_app
    from .turns import rotate_player_turn

    with store.locked_room(room_id) as (room, slot):
        current_app.logger.info(f"[timer-fire] room={room_id} round={room.round} status={room.status}")
        if slot.rotation_token != token:
            current_app.logger.info(f"[timer-abort] room={room_id} superseded or cancelled")
            return False
        slot.clear_rotation()
        if room.status != 'active':
            current_app.logger.info(f"[timer-abort] room={room_id} status={room.status}")
            return False
        rotate_player_turn(room_id)
        return True
