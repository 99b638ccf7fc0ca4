from functools import wraps

import requests
from firebase_admin import auth as firebase_auth
from flask import current_app, g, request, session

from . import users
from .errors import AuthError, ForbiddenError, ServiceUnavailable, ValidationError

IDENTITY_TOOLKIT_URL = 'https://identitytoolkit.googleapis.com/v1/accounts'

FRIENDLY_MESSAGES = {
    'EMAIL_NOT_FOUND': 'Invalid email or password',
    'INVALID_PASSWORD': 'Invalid email or password',
    'INVALID_LOGIN_CREDENTIALS': 'Invalid email or password',
    'USER_DISABLED': 'Your account has been disabled. Please contact support.',
    'INVALID_EMAIL': 'Please enter a valid email address',
    'TOO_MANY_ATTEMPTS_TRY_LATER': 'Too many attempts. Please try again later.',
}


def _identity_toolkit(action: str, payload: dict) -> dict:
    api_key = current_app.config.get('FIREBASE_WEB_API_KEY')
    if not api_key:
        raise ServiceUnavailable('Password sign-in is not configured')
    try:
        resp = requests.post(f'{IDENTITY_TOOLKIT_URL}:{action}?key={api_key}', json=payload, timeout=10)
    except requests.exceptions.RequestException:
        raise ServiceUnavailable('Authentication service is unreachable. Please try again shortly.')

    try:
        data = resp.json()
    except ValueError:
        current_app.logger.warning('Identity Toolkit %s returned a non-JSON %s response', action, resp.status_code)
        raise ServiceUnavailable('Authentication service is unreachable. Please try again shortly.')
    if resp.status_code == 200:
        return data

    # Identity Toolkit codes may carry a suffix, e.g. "TOO_MANY_ATTEMPTS_TRY_LATER : ..."
    error_code = (data.get('error', {}).get('message') or '').split(' ')[0]
    raise AuthError(FRIENDLY_MESSAGES.get(error_code, 'Unable to sign in with Firebase'))


def sign_in_with_password(email: str, password: str) -> dict:
    if not email or not password:
        raise ValidationError('Email and password are required')
    data = _identity_toolkit('signInWithPassword', {
        'email': email,
        'password': password,
        'returnSecureToken': True,
    })
    return {'uid': data['localId'], 'email': data.get('email', email), 'idToken': data.get('idToken')}


def send_password_reset(email: str):
    if not email:
        raise ValidationError('Email is required')
    _identity_toolkit('sendOobCode', {'requestType': 'PASSWORD_RESET', 'email': email})
    current_app.logger.info('Password reset email requested for %s', email)


def register(name: str, email: str, password: str) -> dict:
    if not all([name, email, password]):
        raise ValidationError('Name, email and password are required')
    try:
        firebase_user = firebase_auth.create_user(email=email, password=password, display_name=name.strip())
    except firebase_auth.EmailAlreadyExistsError:
        raise ValidationError('Email already registered')
    except ValueError as exc:
        raise ValidationError(str(exc))

    current_app.logger.info('User registered with Firebase: %s', email)
    return users.ensure_user(firebase_user.uid, email, name.strip())


def verify_id_token(id_token: str) -> dict:
    try:
        decoded = firebase_auth.verify_id_token(id_token)
    except (firebase_auth.InvalidIdTokenError, ValueError):
        raise AuthError('Invalid or expired sign-in token')
    return {
        'uid': decoded['uid'],
        'email': decoded.get('email'),
        'name': decoded.get('name'),
        'picture': decoded.get('picture'),
        'emailVerified': bool(decoded.get('email_verified')),
    }


def start_session(user: dict):
    session['uid'] = user['uid']
    session['email'] = user.get('email')
    session['email_verified'] = user.get('emailVerified', True)


def end_session():
    session.pop('uid', None)
    session.pop('email', None)
    session.pop('email_verified', None)


def current_user():
    """The caller as ``{'uid', 'email'}`` from a Bearer ID token or the session."""
    if 'user' in g:
        return g.user
    user = None
    header = request.headers.get('Authorization', '')
    if header.startswith('Bearer '):
        user = verify_id_token(header[len('Bearer '):].strip())
    elif session.get('uid'):
        user = {
            'uid': session['uid'],
            'email': session.get('email'),
            'emailVerified': session.get('email_verified', True),
        }
    g.user = user
    return user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not current_user():
            raise AuthError('Please Logged In First!')
        return view(*args, **kwargs)
    return wrapper


def require_admin():
    user = current_user()
    if not user:
        raise AuthError('Please Logged In First!')
    if not user.get('emailVerified', True):
        raise ForbiddenError('Please verify your email address to use the admin console')
    if not users.is_admin(user.get('email')):
        current_app.logger.warning('Non-admin %s tried to reach %s', user.get('email'), request.path)
        raise ForbiddenError('Admin access required')
    return user
