from partyroom import socketio

NAMESPACE = '/ws'


def room_channel(room_id: str) -> str:
    return f"room:{room_id}"


def emit_to_room(room_id: str, event: str, payload: dict, skip_sid=None) -> None:
    """Fire-and-forget push to every connection subscribed to the room.

    Callers emit while holding the room's exclusive section, which keeps
    delivery order equal to mutation order for a single room.
    """
    socketio.emit(event, payload, to=room_channel(room_id), namespace=NAMESPACE, skip_sid=skip_sid)


def room_state(room) -> dict:
    return {
        'room': room.to_dict(),
        'players': [p.to_dict() for p in room.players],
        'current_question': room.question,
        'current_player_turn': room.current_player_turn,
        'questions': room.offered_questions,
        'votes': room.votes_by_question(),
        'answers': {a.user_id: a.to_dict() for a in room.answers},
        'round': room.round,
    }
