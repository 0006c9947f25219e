from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from partyroom.services.accounts import friends as friend_service

friends = Blueprint('friends', __name__)


@friends.route('/request', methods=['POST'])
@login_required
def send_request():
    data = request.get_json(silent=True) or {}
    friendship = friend_service.send_friend_request(current_user.id, data.get('user_id'))
    return jsonify({'success': True, 'friendship': friendship.to_dict()}), 201


@friends.route('/accept/<string:friendship_id>', methods=['POST'])
@login_required
def accept_request(friendship_id):
    friendship = friend_service.accept_friend_request(friendship_id, current_user.id)
    return jsonify({'success': True, 'friendship': friendship.to_dict()})


@friends.route('', methods=['GET'])
@login_required
def list_friends():
    found = friend_service.get_user_friends(current_user.id)
    return jsonify({'success': True, 'friends': [u.to_dict() for u in found]})


@friends.route('/requests', methods=['GET'])
@login_required
def pending_requests():
    return jsonify({'success': True, 'requests': friend_service.get_pending_requests(current_user.id)})


@friends.route('/<string:friendship_id>', methods=['DELETE'])
@login_required
def remove_friend(friendship_id):
    return jsonify(friend_service.remove_friend(friendship_id, current_user.id))
