import random

from flask import current_app

from partyroom.errors import (
    InsufficientPlayers, NoActivePlayers, PlayerNotActive, PlayerNotInRoom,
    RoomClosed, RoomNotActive,
)
from partyroom.services.catalog.catalog import draw_prompts
from partyroom.services.live.broadcast import emit_to_room
from . import store
from .lifecycle import require_host
from .scheduler import cancel_turn_rotation


def _clear_turn_state(room):
    room.votes = []
    room.answers = []
    room.question = None


def _next_turn_holder(room):
    """Active player after the current one in join order, wrapping around.

    Restarts at the first active player when the current holder is gone.
    """
    active = room.active_players
    if not active:
        raise NoActivePlayers()
    ids = [p.user_id for p in active]
    if room.current_player_turn in ids:
        idx = ids.index(room.current_player_turn)
        return active[(idx + 1) % len(active)]
    return active[0]


def _turn_payload(room):
    return {
        'room': room.to_dict(),
        'questions': room.offered_questions,
        'current_player_turn': room.current_player_turn,
        'round': room.round,
    }


def start_room(room_id, requested_by=None):
    """Start the game: offer prompts, pick a random first player, round 1.

    Starting an already active room returns it unchanged.
    """
    cfg = current_app.config
    with store.locked_room(room_id) as (room, slot):
        if requested_by is not None:
            require_host(room, requested_by, 'Only the host can start the game')
        if room.status == 'active':
            return room
        if room.status != 'pending':
            raise RoomClosed()
        active = room.active_players
        min_players = int(cfg.get('MIN_PLAYERS', 2))
        if len(active) < min_players:
            raise InsufficientPlayers(f'Need at least {min_players} active players to start')

        room.offered_questions = draw_prompts(room.game_id, int(cfg.get('QUESTIONS_PER_TURN', 3)))
        room.current_player_turn = random.choice(active).user_id
        room.round = 1
        room.status = 'active'
        _clear_turn_state(room)
        cancel_turn_rotation(slot)
        store.save_room(room)

        current_app.logger.info(f"[game-start] room={room.id} first={room.current_player_turn} players={len(active)}")
        emit_to_room(room.id, 'game_started', _turn_payload(room))
        return room


def rotate_player_turn(room_id, acting_user_id=None):
    """Advance to the next turn, or complete the game once the last round is done.

    When ``acting_user_id`` is given only the host may rotate. Returns
    ``(room, game_ended)``.
    """
    cfg = current_app.config
    max_rounds = int(cfg.get('MAX_ROUNDS', 10))
    with store.locked_room(room_id) as (room, slot):
        if acting_user_id is not None:
            require_host(room, acting_user_id, 'Only the host can move to the next turn')
        if room.status != 'active':
            raise RoomNotActive()
        cancel_turn_rotation(slot)
        current_round = room.round or 1

        if current_round >= max_rounds:
            room.status = 'completed'
            store.save_room(room)
            current_app.logger.info(f"[game-end] room={room.id} finished at round={current_round}")
            emit_to_room(room.id, 'game_ended', {
                'message': f'Game completed! All {max_rounds} rounds finished.',
                'room': room.to_dict(),
            })
            return room, True

        next_player = _next_turn_holder(room)
        room.offered_questions = draw_prompts(room.game_id, int(cfg.get('QUESTIONS_PER_TURN', 3)))
        room.current_player_turn = next_player.user_id
        room.round = current_round + 1
        _clear_turn_state(room)
        store.save_room(room)

        current_app.logger.info(
            f"[turn-rotate] room={room.id} round {current_round} -> {room.round} player={room.current_player_turn}"
        )
        emit_to_room(room.id, 'turn_rotated', _turn_payload(room))
        emit_to_room(room.id, 'player_turn_changed', {'player_id': room.current_player_turn, 'room': room.to_dict()})
        return room, False


def set_player_turn(room_id, acting_user_id, player_id):
    with store.locked_room(room_id) as (room, _slot):
        require_host(room, acting_user_id, 'Only the host can set player turn')
        if room.status in ('completed', 'terminated'):
            raise RoomClosed()
        target = room.find_player(player_id)
        if target is None:
            raise PlayerNotInRoom()
        if not target.is_active:
            raise PlayerNotActive()
        room.current_player_turn = target.user_id
        # The turn-holder never votes
        room.votes = [v for v in room.votes if v.user_id != target.user_id]
        store.save_room(room)

        current_app.logger.info(f"[turn-set] room={room.id} player={player_id} by={acting_user_id}")
        emit_to_room(room.id, 'player_turn_changed', {'player_id': player_id, 'room': room.to_dict()})
        return room


def set_current_question(room_id, acting_user_id, question):
    with store.locked_room(room_id) as (room, _slot):
        require_host(room, acting_user_id, 'Only host can set questions')
        if room.status in ('completed', 'terminated'):
            raise RoomClosed()
        room.question = question
        store.save_room(room)

        current_app.logger.info(f"[question-set] room={room.id} by={acting_user_id}")
        emit_to_room(room.id, 'question_set', {'question': room.question})
        return room
