import pytest
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash

from config import TestingConfig
from tripai import create_app
from tripai.models import db
from tripai.services import AdminVerifier
from tripai.store import InMemoryStore

# Cheap hashes keep the suite fast; production uses werkzeug's default
FAST_HASH = 'pbkdf2:sha256:1000'


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_store(app):
    return app.extensions['tripai.store']


@pytest.fixture(params=['memory', 'sql'])
def store(request):
    """Both store implementations behind the same interface."""
    if request.param == 'memory':
        return InMemoryStore()
    app = request.getfixturevalue('app')
    return app.extensions['tripai.store']


@pytest.fixture
def admin_verifier():
    return AdminVerifier(
        'admin@tripai.com',
        password_hash=generate_password_hash('admin123', method=FAST_HASH)
    )


def make_user(store, user_id='1', balance=500, email=None, password='password',
              status='Active', role='user', name='Demo User', created_at=None):
    record = {
        'id': user_id,
        'name': name,
        'email': email or f'user{user_id}@demo.com',
        'passwordHash': generate_password_hash(password, method=FAST_HASH),
        'role': role,
        'walletBalance': balance,
        'joinedAt': '2024-01-15',
        'status': status,
    }
    if created_at:
        record['createdAt'] = created_at
    with store.atomic():
        return store.users.insert(record)


def booking_request(**overrides):
    data = {
        'customerName': 'Bob',
        'email': 'b@x.com',
        'destinationName': 'Goa',
        'date': '2025-01-01',
        'totalPrice': 10000,
    }
    data.update(overrides)
    return data


@pytest.fixture
def token_for(app):
    def _token_for(user_id, role='user'):
        return create_access_token(identity=str(user_id), additional_claims={'role': role})
    return _token_for


@pytest.fixture
def admin_headers(token_for):
    return {'Authorization': f"Bearer {token_for(AdminVerifier.ADMIN_ID, 'admin')}"}


@pytest.fixture
def user_headers(token_for):
    def _user_headers(user_id='1'):
        return {'Authorization': f'Bearer {token_for(user_id)}'}
    return _user_headers
