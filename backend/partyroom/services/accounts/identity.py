from collections import namedtuple

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from partyroom.errors import InvalidCredential

Identity = namedtuple('Identity', ['external_id', 'email', 'display_name'])

_TOKEN_SALT = 'partyroom-access-token'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=_TOKEN_SALT)


def issue_token(user) -> str:
    return _serializer().dumps({
        'uid': user.id,
        'email': user.email,
        'name': user.public_name,
    })


def verify_token(credential) -> Identity:
    """Verify a signed access token and return the identity it carries."""
    if not credential:
        raise InvalidCredential('No token provided')
    max_age = int(current_app.config.get('TOKEN_MAX_AGE_SEC', 7 * 24 * 3600))
    try:
        data = _serializer().loads(credential, max_age=max_age)
    except SignatureExpired:
        raise InvalidCredential('Token expired')
    except BadSignature:
        raise InvalidCredential()
    if not isinstance(data, dict) or not data.get('uid'):
        raise InvalidCredential()
    return Identity(data['uid'], data.get('email'), data.get('name'))


def bearer_token(header_value):
    if not header_value:
        return None
    if header_value.startswith('Bearer '):
        return header_value[7:].strip()
    return header_value.strip()


def user_from_authorization(header_value):
    """Resolve an ``Authorization`` header to a stored user, or None."""
    from partyroom.services.accounts.profiles import get_user

    token = bearer_token(header_value)
    if not token:
        return None
    try:
        identity = verify_token(token)
    except InvalidCredential as exc:
        current_app.logger.info(f"[auth-refused] {exc.message}")
        return None
    return get_user(identity.external_id)
