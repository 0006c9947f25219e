from partyroom import db
from flask_login import UserMixin
from datetime import datetime, timezone
import json
import uuid


ROOM_STATUSES = ('pending', 'active', 'completed', 'terminated')
OPEN_STATUSES = ('pending', 'active')
FRIENDSHIP_STATUSES = ('pending', 'accepted', 'blocked')


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id():
    return uuid.uuid4().hex


def _iso(value):
    return value.isoformat() if value else None


def _load_json(raw, default):
    if not raw:
        return default
    return json.loads(raw)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.String(128), primary_key=True, default=new_id)
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    username = db.Column(db.String(64), unique=True, nullable=True, index=True)
    display_name = db.Column(db.String(128), nullable=False, default='')
    photo_url = db.Column(db.String(512), nullable=False, default='')
    about = db.Column(db.Text, nullable=False, default='')
    password_hash = db.Column(db.String(256), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    @property
    def public_name(self):
        return self.display_name or self.username or 'Anonymous'

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'display_name': self.display_name,
            'photo_url': self.photo_url,
            'about': self.about,
            'created_at': _iso(self.created_at),
        }


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.String(64), primary_key=True, default=new_id)
    name = db.Column(db.String(128), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False, default='')
    category = db.Column(db.String(64), nullable=True, index=True)
    min_players = db.Column(db.Integer, nullable=False, default=2)
    max_players = db.Column(db.Integer, nullable=False, default=10)
    prompts = db.relationship('Prompt', back_populates='game', order_by='Prompt.id', cascade='all, delete-orphan')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self, include_prompts=True):
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'min_players': self.min_players,
            'max_players': self.max_players,
        }
        if include_prompts:
            data['questions'] = [p.to_dict() for p in self.prompts]
        return data


class Prompt(db.Model):
    __tablename__ = 'prompt'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.String(64), db.ForeignKey('game.id'), nullable=False, index=True)
    key = db.Column(db.String(64), nullable=False, default=new_id)
    text = db.Column(db.Text, nullable=False)
    difficulty = db.Column(db.String(16), nullable=False, default='medium')
    extra = db.Column(db.Text, nullable=True)  # JSON-encoded optional fields (type, optionA, hint, ...)
    game = db.relationship('Game', back_populates='prompts')

    __table_args__ = (
        db.UniqueConstraint('game_id', 'key', name='uq_prompt_game_key'),
    )

    def to_dict(self):
        data = _load_json(self.extra, {})
        data.update({
            'id': self.key,
            'text': self.text,
            'difficulty': self.difficulty,
        })
        return data


class Room(db.Model):
    __tablename__ = 'room'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    # Unique among open rooms only; closed rooms keep their code for history
    code = db.Column(db.String(6), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    host_id = db.Column(db.String(128), nullable=False)
    host_name = db.Column(db.String(128), nullable=False, default='')
    game_id = db.Column(db.String(64), nullable=True)
    game_name = db.Column(db.String(128), nullable=True)
    max_players = db.Column(db.Integer, nullable=False, default=10)
    status = db.Column(db.String(16), nullable=False, default='pending', index=True)
    questions = db.Column(db.Text, nullable=True)  # JSON-encoded list of offered prompts
    current_question = db.Column(db.Text, nullable=True)  # JSON-encoded prompt
    current_player_turn = db.Column(db.String(128), nullable=True)
    round = db.Column(db.Integer, nullable=True)
    selected_friends = db.Column(db.Text, nullable=True)  # JSON-encoded list of user ids
    players = db.relationship('RoomPlayer', back_populates='room', order_by='RoomPlayer.id', cascade='all, delete-orphan')
    votes = db.relationship('Vote', back_populates='room', order_by='Vote.id', cascade='all, delete-orphan')
    answers = db.relationship('Answer', back_populates='room', order_by='Answer.id', cascade='all, delete-orphan')
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    @property
    def offered_questions(self):
        return _load_json(self.questions, [])

    @offered_questions.setter
    def offered_questions(self, value):
        self.questions = json.dumps(list(value or []))

    @property
    def question(self):
        return _load_json(self.current_question, None)

    @question.setter
    def question(self, value):
        self.current_question = json.dumps(value) if value is not None else None

    @property
    def friends_invited(self):
        return _load_json(self.selected_friends, [])

    @property
    def active_players(self):
        return [p for p in self.players if p.is_active]

    @property
    def is_open(self):
        return self.status in OPEN_STATUSES

    def find_player(self, user_id):
        for p in self.players:
            if p.user_id == user_id:
                return p
        return None

    def votes_by_question(self):
        """Votes grouped per prompt id, in offered-question order."""
        grouped = {q['id']: [] for q in self.offered_questions}
        for v in self.votes:
            grouped.setdefault(v.question_id, []).append(v.to_dict())
        return {qid: voters for qid, voters in grouped.items() if voters}

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'host_id': self.host_id,
            'host_name': self.host_name,
            'game_id': self.game_id,
            'game_name': self.game_name,
            'max_players': self.max_players,
            'status': self.status,
            'players': [p.to_dict() for p in self.players],
            'active_player_count': len(self.active_players),
            'questions': self.offered_questions,
            'current_question': self.question,
            'current_player_turn': self.current_player_turn,
            'votes': self.votes_by_question(),
            'answers': {a.user_id: a.to_dict() for a in self.answers},
            'round': self.round,
            'selected_friends': self.friends_invited,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }


class RoomPlayer(db.Model):
    __tablename__ = 'room_player'
    # Insertion id doubles as join order
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(36), db.ForeignKey('room.id'), nullable=False, index=True)
    user_id = db.Column(db.String(128), nullable=False, index=True)
    username = db.Column(db.String(128), nullable=False, default='')
    avatar = db.Column(db.String(512), nullable=False, default='')
    is_host = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    joined_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    left_at = db.Column(db.DateTime, nullable=True)
    rejoined_at = db.Column(db.DateTime, nullable=True)
    room = db.relationship('Room', back_populates='players')

    __table_args__ = (
        db.UniqueConstraint('room_id', 'user_id', name='uq_room_player_room_user'),
    )

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'username': self.username,
            'avatar': self.avatar,
            'is_host': self.is_host,
            'is_active': self.is_active,
            'joined_at': _iso(self.joined_at),
            'left_at': _iso(self.left_at),
            'rejoined_at': _iso(self.rejoined_at),
        }


class Vote(db.Model):
    __tablename__ = 'vote'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(36), db.ForeignKey('room.id'), nullable=False, index=True)
    question_id = db.Column(db.String(64), nullable=False)
    user_id = db.Column(db.String(128), nullable=False)
    username = db.Column(db.String(128), nullable=False, default='')
    cast_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    room = db.relationship('Room', back_populates='votes')

    # One vote per user per turn; votes are cleared on rotation
    __table_args__ = (
        db.UniqueConstraint('room_id', 'user_id', name='uq_vote_room_user'),
    )

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'username': self.username,
            'cast_at': _iso(self.cast_at),
        }


class Answer(db.Model):
    __tablename__ = 'answer'
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(36), db.ForeignKey('room.id'), nullable=False, index=True)
    user_id = db.Column(db.String(128), nullable=False)
    question_id = db.Column(db.String(64), nullable=True)
    content = db.Column(db.Text, nullable=False)
    shared = db.Column(db.Boolean, nullable=False, default=False)
    submitted_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    room = db.relationship('Room', back_populates='answers')

    __table_args__ = (
        db.UniqueConstraint('room_id', 'user_id', name='uq_answer_room_user'),
    )

    def to_dict(self):
        return {
            'answer': self.content,
            'question_id': self.question_id,
            'shared': self.shared,
            'submitted_at': _iso(self.submitted_at),
        }


class Friendship(db.Model):
    __tablename__ = 'friendship'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    # Pair stored sorted so the unique constraint covers both directions
    user_low = db.Column(db.String(128), nullable=False, index=True)
    user_high = db.Column(db.String(128), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default='pending')
    requested_by = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('user_low', 'user_high', name='uq_friendship_pair'),
    )

    @staticmethod
    def ordered_pair(a, b):
        return (a, b) if a <= b else (b, a)

    @property
    def users(self):
        return [self.user_low, self.user_high]

    def other_user(self, user_id):
        return self.user_high if user_id == self.user_low else self.user_low

    def involves(self, user_id):
        return user_id in (self.user_low, self.user_high)

    def to_dict(self):
        return {
            'id': self.id,
            'users': self.users,
            'status': self.status,
            'requested_by': self.requested_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
