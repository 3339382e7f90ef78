import pytest

from fintrack import store
from fintrack.auth import AuthService, User
from fintrack.errors import AuthError


def _build_auth():
    return AuthService(iterations=1000)


def test_sign_up_signs_in_and_normalizes_email(db_path):
    auth = _build_auth()
    user = auth.sign_up('  Alice@Example.com ', 'secret1')
    assert user.email == 'alice@example.com'
    assert len(user.uid) == 32
    assert auth.current_user == user


def test_password_is_stored_hashed(db_path):
    _build_auth().sign_up('alice@example.com', 'secret1')
    with store.connect() as conn:
        row = conn.execute("SELECT password_hash, salt FROM users").fetchone()
    assert row['password_hash'] != 'secret1'
    assert len(row['salt']) == 32


def test_duplicate_email_is_rejected(db_path):
    auth = _build_auth()
    auth.sign_up('alice@example.com', 'secret1')
    with pytest.raises(AuthError, match='Email already in use'):
        auth.sign_up('ALICE@example.com', 'another1')


@pytest.mark.parametrize("email, password, message", [
    ('alice@example.com', '123', 'at least 6 characters'),
    ('', 'secret1', 'required'),
    ('not-an-email', 'secret1', 'valid email'),
])
def test_sign_up_validation(db_path, email, password, message):
    with pytest.raises(AuthError, match=message):
        _build_auth().sign_up(email, password)


def test_sign_in(db_path):
    created = _build_auth().sign_up('alice@example.com', 'secret1')
    auth = _build_auth()
    user = auth.sign_in('Alice@Example.com', 'secret1')
    assert user == created
    assert auth.find_user('alice@example.com') == created
    assert auth.find_user('bob@example.com') is None


@pytest.mark.parametrize("email, password", [
    ('alice@example.com', 'wrong-password'),
    ('bob@example.com', 'secret1'),
])
def test_sign_in_rejects_bad_credentials(db_path, email, password):
    _build_auth().sign_up('alice@example.com', 'secret1')
    auth = _build_auth()
    with pytest.raises(AuthError, match='Invalid email or password'):
        auth.sign_in(email, password)
    assert auth.current_user is None


def test_observe_session(db_path):
    auth = _build_auth()
    seen = []
    unsubscribe = auth.observe_session(seen.append)
    assert seen == [None]

    user = auth.sign_up('alice@example.com', 'secret1')
    auth.sign_out()
    assert seen == [None, user, None]

    unsubscribe()
    unsubscribe()
    auth.sign_in('alice@example.com', 'secret1')
    assert seen == [None, user, None]
    assert isinstance(auth.current_user, User)
