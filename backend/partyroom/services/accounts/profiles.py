from sqlalchemy import or_

from partyroom import db, bcrypt
from partyroom.errors import InvalidLogin, MissingField, UsernameTaken
from partyroom.models import User, new_id, utcnow

_PROFILE_FIELDS = ('email', 'username', 'display_name', 'photo_url', 'about')


def get_user(user_id):
    if not user_id:
        return None
    return db.session.get(User, user_id)


def upsert_user(profile: dict) -> User:
    """Create or merge a profile keyed by ``profile['id']``.

    Existing users keep their original ``created_at``; only fields present
    in ``profile`` are overwritten.
    """
    user_id = profile.get('id')
    if not user_id:
        raise MissingField('Profile id is required')
    user = db.session.get(User, user_id)
    if user is None:
        user = User(id=user_id)
        if profile.get('created_at'):
            user.created_at = profile['created_at']
        db.session.add(user)
    for field in _PROFILE_FIELDS:
        if profile.get(field) is not None:
            setattr(user, field, profile[field])
    if not user.username and user.email:
        user.username = user.email.split('@')[0]
    user.updated_at = utcnow()
    db.session.commit()
    return user


def update_profile(user, data) -> User:
    """Apply a profile edit. Blank fields are ignored, except `about`, which may be cleared."""
    username = (data.get('username') or '').strip() or None
    if username and username != user.username:
        if User.query.filter(User.username == username, User.id != user.id).first():
            raise UsernameTaken()
    return upsert_user({
        'id': user.id,
        'display_name': data.get('display_name') or data.get('displayName') or None,
        'username': username,
        'photo_url': data.get('photo_url') or data.get('photoURL') or None,
        'about': data.get('about'),
    })


def register_user(email, password, name) -> User:
    if not all([email, password, name]):
        raise MissingField('Email, password and name are required')
    email = email.strip().lower()
    username = email.split('@')[0]
    clash = User.query.filter(or_(User.email == email, User.username == username)).first()
    if clash:
        raise UsernameTaken()
    user = upsert_user({
        'id': new_id(),
        'email': email,
        'username': username,
        'display_name': name,
    })
    user.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')
    db.session.commit()
    return user


def authenticate(identifier, password) -> User:
    """Check a local email-or-username and password pair."""
    if not identifier or not password:
        raise MissingField('Email and password are required')
    identifier = identifier.strip()
    user = User.query.filter(or_(User.email == identifier.lower(), User.username == identifier)).first()
    if not user or not user.password_hash or not bcrypt.check_password_hash(user.password_hash, password):
        raise InvalidLogin()
    return user
