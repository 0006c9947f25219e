"""Failure taxonomy shared by the HTTP routes and the live channel.

Every domain failure is a ``PartyRoomError`` carrying a kind (``not_found``,
``conflict``, ``forbidden``, ``validation``, ``unauthenticated``,
``unavailable``), the HTTP status it maps to, and a human-readable message.
Routes let these propagate to the Flask error handler; socket handlers turn
them into an ``error`` event for the offending connection.
"""


class PartyRoomError(Exception):
    kind = 'error'
    status_code = 500
    default_message = 'Unexpected error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {
            'success': False,
            'error': self.kind,
            'code': type(self).__name__,
            'message': self.message,
        }


class NotFoundError(PartyRoomError):
    kind = 'not_found'
    status_code = 404
    default_message = 'Not found'


class ConflictError(PartyRoomError):
    kind = 'conflict'
    status_code = 409
    default_message = 'Conflict'


class ForbiddenError(PartyRoomError):
    kind = 'forbidden'
    status_code = 403
    default_message = 'Forbidden'


class ValidationError(PartyRoomError):
    kind = 'validation'
    status_code = 400
    default_message = 'Invalid request'


class UnauthenticatedError(PartyRoomError):
    kind = 'unauthenticated'
    status_code = 401
    default_message = 'Authentication required'


class UnavailableError(PartyRoomError):
    kind = 'unavailable'
    status_code = 503
    default_message = 'Service temporarily unavailable'


# Not found
class RoomNotFound(NotFoundError):
    default_message = 'Room not found'


class GameNotFound(NotFoundError):
    default_message = 'Game not found'


class PlayerNotInRoom(NotFoundError):
    default_message = 'Player not found in room'


class FriendshipNotFound(NotFoundError):
    default_message = 'Friendship not found'


class UserNotFound(NotFoundError):
    default_message = 'User not found'


# Conflict
class RoomFull(ConflictError):
    default_message = 'Room is full'


class RoomClosed(ConflictError):
    default_message = 'Room is no longer available'


class RoomNotActive(ConflictError):
    default_message = 'Game is not in progress'


class InsufficientPlayers(ConflictError):
    default_message = 'Need at least 2 active players to start'


class NoActivePlayers(ConflictError):
    default_message = 'No active players in room'


class DuplicateFriendship(ConflictError):
    default_message = 'Friendship already exists'


class FriendRequestProcessed(ConflictError):
    default_message = 'Friend request already processed'


class UsernameTaken(ConflictError):
    default_message = 'Email or username already registered'


# Forbidden
class NotRoomHost(ForbiddenError):
    default_message = 'Only the host can do that'


class WrongTurn(ForbiddenError):
    default_message = 'It is not your turn to answer'


class InvalidVoter(ForbiddenError):
    default_message = 'You cannot vote - it is your turn to answer'


class NotARoomMember(ForbiddenError):
    default_message = 'You are not a member of this room'


class NotFriendshipParty(ForbiddenError):
    default_message = 'Unauthorized'


# Validation
class InvalidRoomCode(ValidationError):
    default_message = 'Room code must be 6 characters'


class InvalidPlayerCount(ValidationError):
    default_message = 'Max players must be between 2 and 20'


class InvalidRoomName(ValidationError):
    default_message = 'Room name must be 3-50 characters'


class QuestionNotOffered(ValidationError):
    default_message = 'That question is not up for vote'


class PlayerNotActive(ValidationError):
    default_message = 'Player is no longer active in this room'


class InvalidAnswer(ValidationError):
    default_message = 'Answer must be 1-1000 characters'


class InvalidFriendRequest(ValidationError):
    default_message = 'Cannot send friend request to yourself'


class MissingField(ValidationError):
    default_message = 'Missing required field'


# Unauthenticated
class InvalidCredential(UnauthenticatedError):
    default_message = 'Invalid token'


class InvalidLogin(UnauthenticatedError):
    default_message = 'Invalid email or password'


# Unavailable
class RoomBusy(UnavailableError):
    default_message = 'Room is busy, try again'


class StoreUnavailable(UnavailableError):
    default_message = 'Room store is unavailable'
