from flask import Blueprint, jsonify, request, current_app
from flask_login import current_user, login_required

from partyroom.errors import MissingField
from partyroom.services.rooms import lifecycle, store, turns, voting

rooms = Blueprint('rooms', __name__)
sessions = Blueprint('sessions', __name__)


def _json_body():
    return request.get_json(silent=True) or {}


@rooms.route('/create', methods=['POST'])
@login_required
def create_room():
    data = _json_body()
    game_id = data.get('game_id')
    if not game_id:
        raise MissingField('Game ID is required')
    room = lifecycle.create_room(
        current_user,
        game_id,
        max_players=data.get('max_players'),
        name=data.get('name'),
        selected_friends=data.get('selected_friends'),
    )
    return jsonify({'success': True, 'room': room.to_dict()}), 201


@rooms.route('/join/<string:code>', methods=['POST'])
@login_required
def join_room(code):
    outcome = lifecycle.join_room(code, current_user)
    room = outcome.room
    if outcome.should_auto_start:
        current_app.logger.info(f"[room-join] room={room.id} full, starting")
        room = turns.start_room(room.id)
    return jsonify({
        'success': True,
        'room': room.to_dict(),
        'should_auto_start': outcome.should_auto_start,
    })


@rooms.route('/validate/<string:code>', methods=['POST'])
def validate_room(code):
    validation = lifecycle.validate_room_code(code)
    if not validation['valid']:
        return jsonify({'success': False, 'message': validation['message']}), 400
    return jsonify({'success': True, 'room': validation['room'].to_dict()})


@rooms.route('/<string:room_id>', methods=['GET'])
@login_required
def get_room(room_id):
    room = store.require_room(room_id)
    return jsonify({'success': True, 'room': room.to_dict()})


@rooms.route('/<string:room_id>', methods=['DELETE'])
@login_required
def delete_room(room_id):
    room = lifecycle.terminate_room(room_id, current_user.id)
    return jsonify({'success': True, 'room': room.to_dict()})


@rooms.route('/<string:room_id>/leave', methods=['POST'])
@login_required
def leave_room(room_id):
    room = lifecycle.leave_room(room_id, current_user.id)
    return jsonify({'success': True, 'room': room.to_dict()})


@rooms.route('/<string:room_id>/rejoin', methods=['POST'])
@login_required
def rejoin_room(room_id):
    room = lifecycle.rejoin_room(room_id, current_user)
    return jsonify({'success': True, 'room': room.to_dict()})


@rooms.route('/<string:room_id>/start', methods=['POST'])
@login_required
def start_room(room_id):
    room = turns.start_room(room_id, requested_by=current_user.id)
    return jsonify({'success': True, 'room': room.to_dict()})


@rooms.route('/<string:room_id>/set-player-turn', methods=['POST'])
@login_required
def set_player_turn(room_id):
    player_id = _json_body().get('player_id')
    if not player_id:
        raise MissingField('Player ID is required')
    room = turns.set_player_turn(room_id, current_user.id, player_id)
    return jsonify({'success': True, 'room': room.to_dict()})


@rooms.route('/<string:room_id>/vote', methods=['POST'])
@login_required
def vote(room_id):
    question_id = _json_body().get('question_id')
    if not question_id:
        raise MissingField('Question ID is required')
    room, tally = voting.submit_vote(room_id, current_user, question_id)
    return jsonify({
        'success': True,
        'room': room.to_dict(),
        'vote_counts': tally.vote_counts,
        'voting_complete': tally.voting_complete,
        'winning_question': tally.winning_question,
    })


@rooms.route('/<string:room_id>/answer', methods=['POST'])
@login_required
def answer(room_id):
    data = _json_body()
    room = voting.submit_answer(room_id, current_user, data.get('answer'), data.get('question_id'))
    return jsonify({'success': True, 'room': room.to_dict()})


@rooms.route('/<string:room_id>/next-turn', methods=['POST'])
@login_required
def next_turn(room_id):
    room, game_ended = turns.rotate_player_turn(room_id, acting_user_id=current_user.id)
    return jsonify({'success': True, 'room': room.to_dict(), 'game_ended': game_ended})


@rooms.route('/user/my-rooms', methods=['GET'])
@login_required
def my_rooms():
    return jsonify({'success': True, 'rooms': lifecycle.get_user_rooms(current_user.id)})


@sessions.route('', methods=['GET'])
@login_required
def list_sessions():
    return jsonify({'success': True, 'sessions': lifecycle.get_user_rooms(current_user.id)})
