from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from partyroom import db
from partyroom.errors import (
    DuplicateFriendship, FriendRequestProcessed, FriendshipNotFound,
    InvalidFriendRequest, MissingField, NotFriendshipParty, UserNotFound,
)
from partyroom.models import Friendship, User, utcnow


def _friendships_of(user_id):
    return Friendship.query.filter(or_(Friendship.user_low == user_id, Friendship.user_high == user_id))


def _require_party(friendship_id, user_id) -> Friendship:
    friendship = db.session.get(Friendship, friendship_id)
    if friendship is None:
        raise FriendshipNotFound()
    if not friendship.involves(user_id):
        raise NotFriendshipParty()
    return friendship


def send_friend_request(from_user_id, to_user_id) -> Friendship:
    if not to_user_id:
        raise MissingField('User ID is required')
    if from_user_id == to_user_id:
        raise InvalidFriendRequest()
    if db.session.get(User, to_user_id) is None:
        raise UserNotFound()
    low, high = Friendship.ordered_pair(from_user_id, to_user_id)
    if Friendship.query.filter_by(user_low=low, user_high=high).first():
        raise DuplicateFriendship()
    friendship = Friendship(user_low=low, user_high=high, status='pending', requested_by=from_user_id)
    db.session.add(friendship)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with the reverse request
        db.session.rollback()
        raise DuplicateFriendship()
    current_app.logger.info(f"[friend-request] {from_user_id} -> {to_user_id}")
    return friendship


def accept_friend_request(friendship_id, user_id) -> Friendship:
    friendship = _require_party(friendship_id, user_id)
    if friendship.requested_by == user_id:
        raise NotFriendshipParty('Only the recipient can accept a friend request')
    if friendship.status != 'pending':
        raise FriendRequestProcessed()
    friendship.status = 'accepted'
    friendship.updated_at = utcnow()
    db.session.commit()
    return friendship


def get_user_friends(user_id):
    friendships = _friendships_of(user_id).filter(Friendship.status == 'accepted').all()
    friend_ids = [f.other_user(user_id) for f in friendships]
    if not friend_ids:
        return []
    return User.query.filter(User.id.in_(friend_ids)).order_by(User.display_name).all()


def get_pending_requests(user_id):
    """Incoming requests, each as the requester's profile plus ``request_id``."""
    requests = (
        _friendships_of(user_id)
        .filter(Friendship.status == 'pending', Friendship.requested_by != user_id)
        .order_by(Friendship.created_at)
        .all()
    )
    result = []
    for req in requests:
        requester = db.session.get(User, req.requested_by)
        if requester is None:
            continue
        data = requester.to_dict()
        data['request_id'] = req.id
        result.append(data)
    return result


def remove_friend(friendship_id, user_id):
    friendship = _require_party(friendship_id, user_id)
    db.session.delete(friendship)
    db.session.commit()
    return {'success': True}
