import pytest
import requests
from firebase_admin import auth as firebase_auth

from conftest import FakeResponse


@pytest.fixture
def identity_toolkit(monkeypatch):
    calls = []

    def respond_with(status_code, payload):
        def fake_post(url, json=None, timeout=None):
            calls.append((url, json))
            return FakeResponse(status_code, payload)
        monkeypatch.setattr('camstore.auth.requests.post', fake_post)
        return calls

    return respond_with


def test_login_creates_profile(client, db, identity_toolkit):
    calls = identity_toolkit(200, {'localId': 'new-uid', 'email': 'new@example.com', 'idToken': 't'})
    resp = client.post('/api/auth/login', json={'email': 'new@example.com', 'password': 'pw'})

    assert resp.status_code == 200
    assert resp.get_json()['syncedCartItems'] == 0
    assert calls[0][0].endswith('accounts:signInWithPassword?key=web-api-key')
    assert db.docs('users')['new-uid']['displayName'] == 'new'

    me = client.get('/api/auth/me').get_json()
    assert me['user']['email'] == 'new@example.com'
    assert me['isAdmin'] is False


@pytest.mark.parametrize('code, message', [
    ('INVALID_LOGIN_CREDENTIALS', 'Invalid email or password'),
    ('USER_DISABLED', 'Your account has been disabled. Please contact support.'),
    ('TOO_MANY_ATTEMPTS_TRY_LATER : Access temporarily disabled', 'Too many attempts. Please try again later.'),
    ('SOMETHING_NEW', 'Unable to sign in with Firebase'),
])
def test_login_errors_are_friendly(client, identity_toolkit, code, message):
    identity_toolkit(400, {'error': {'message': code}})
    resp = client.post('/api/auth/login', json={'email': 'a@example.com', 'password': 'pw'})
    assert resp.status_code == 401
    assert resp.get_json() == {'success': False, 'message': message}


def test_login_requires_credentials(client):
    resp = client.post('/api/auth/login', json={'email': 'a@example.com'})
    assert resp.status_code == 400


def test_login_when_identity_service_is_down(client, monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError('offline')
    monkeypatch.setattr('camstore.auth.requests.post', boom)

    resp = client.post('/api/auth/login', json={'email': 'a@example.com', 'password': 'pw'})
    assert resp.status_code == 503


def test_login_with_non_json_gateway_error(client, monkeypatch):
    class GatewayError:
        status_code = 502

        def json(self):
            raise ValueError('Expecting value: line 1 column 1 (char 0)')

    monkeypatch.setattr('camstore.auth.requests.post', lambda *args, **kwargs: GatewayError())

    resp = client.post('/api/auth/login', json={'email': 'a@example.com', 'password': 'pw'})
    assert resp.status_code == 503
    assert resp.get_json()['message'] == 'Authentication service is unreachable. Please try again shortly.'


def test_login_without_web_api_key(app, client):
    app.config['FIREBASE_WEB_API_KEY'] = None
    resp = client.post('/api/auth/login', json={'email': 'a@example.com', 'password': 'pw'})
    assert resp.status_code == 503
    assert resp.get_json()['message'] == 'Password sign-in is not configured'


def test_forgot_password(client, identity_toolkit):
    calls = identity_toolkit(200, {'email': 'a@example.com'})
    resp = client.post('/api/auth/forgot-password', json={'email': 'a@example.com'})
    assert resp.get_json()['message'] == 'Reset Link has been sent to your email!'
    assert calls[0][1] == {'requestType': 'PASSWORD_RESET', 'email': 'a@example.com'}


def test_register(client, db, monkeypatch):
    class Created:
        uid = 'reg-uid'

    monkeypatch.setattr(firebase_auth, 'create_user', lambda **kwargs: Created())
    resp = client.post('/api/auth/register', json={'name': 'Kamal', 'email': 'kamal@example.com', 'password': 'pw1234'})
    assert resp.status_code == 200
    assert db.docs('users')['reg-uid']['displayName'] == 'Kamal'


def test_register_duplicate_email(client, monkeypatch):
    def already_exists(**kwargs):
        raise firebase_auth.EmailAlreadyExistsError('exists', None, None)

    monkeypatch.setattr(firebase_auth, 'create_user', already_exists)
    resp = client.post('/api/auth/register', json={'name': 'Kamal', 'email': 'kamal@example.com', 'password': 'pw'})
    assert resp.status_code == 400
    assert resp.get_json()['message'] == 'Email already registered'


def test_google_login_with_id_token(client, db, monkeypatch):
    monkeypatch.setattr(firebase_auth, 'verify_id_token', lambda token: {
        'uid': 'g-uid', 'email': 'g@example.com', 'name': 'Google User', 'picture': 'https://pic',
    })
    resp = client.post('/api/auth/google', json={'idToken': 'google-token'})
    assert resp.status_code == 200
    assert db.docs('users')['g-uid']['photoURL'] == 'https://pic'


def test_bearer_token_identifies_admin(client, monkeypatch):
    monkeypatch.setattr(firebase_auth, 'verify_id_token', lambda token: {
        'uid': 'a-uid', 'email': 'admin@example.com', 'email_verified': True,
    })
    resp = client.get('/api/admin/summary', headers={'Authorization': 'Bearer admin-token'})
    assert resp.status_code == 200


def test_unverified_admin_email_is_refused(client, monkeypatch):
    monkeypatch.setattr(firebase_auth, 'verify_id_token', lambda token: {
        'uid': 'intruder', 'email': 'admin@example.com', 'email_verified': False,
    })
    resp = client.get('/api/admin/summary', headers={'Authorization': 'Bearer admin-token'})
    assert resp.status_code == 403
    assert resp.get_json()['message'] == 'Please verify your email address to use the admin console'


def test_bad_bearer_token(client, monkeypatch):
    def reject(token):
        raise firebase_auth.InvalidIdTokenError('bad token')

    monkeypatch.setattr(firebase_auth, 'verify_id_token', reject)
    resp = client.get('/api/auth/me', headers={'Authorization': 'Bearer nope'})
    assert resp.status_code == 401
    assert resp.get_json()['message'] == 'Invalid or expired sign-in token'


def test_logout_clears_session(customer_client):
    assert customer_client.get('/api/auth/me').status_code == 200
    customer_client.post('/api/auth/logout')
    assert customer_client.get('/api/auth/me').status_code == 401
