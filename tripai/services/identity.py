"""Login, signup and admin user management.

Passwords are only ever stored and compared as werkzeug hashes. Credential
checks go through a ``CredentialVerifier`` so the configured super-admin and
the users collection are interchangeable sources of identities.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from urllib.parse import quote_plus

from werkzeug.security import check_password_hash, generate_password_hash

from ..errors import (
    AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
)
from ..models import USER_ROLES, USER_STATUSES
from ..store import canonical_id
from ..validation import (
    as_choice, as_email, as_int, as_text, ensure_json_object, missing_fields, reject_unknown
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
DEFAULT_SIGNUP_BONUS = 500
EDITABLE_FIELDS = ('name', 'email', 'role', 'status', 'walletBalance', 'avatar')
READ_ONLY_FIELDS = ('id', 'joinedAt', 'createdAt', 'password', 'passwordHash')


def avatar_url(name, background='random'):
    return f'https://ui-avatars.com/api/?name={quote_plus(name)}&background={background}&color=fff'


def sanitize_user(user):
    """Copy of ``user`` that is safe to send to a client."""
    return {key: value for key, value in user.items() if key != 'passwordHash'}


@dataclass
class Identity:
    user: dict
    role: str

    @property
    def user_id(self):
        return self.user['id']


class CredentialVerifier(ABC):

    @abstractmethod
    def authenticate(self, email, secret):
        """Return an Identity for matching credentials, otherwise None."""


class AdminVerifier(CredentialVerifier):
    """The single configured super-admin account; never touches the store."""

    ADMIN_ID = 'admin_01'

    def __init__(self, email, password=None, password_hash=None):
        if not (password or password_hash):
            raise ValueError('AdminVerifier needs a password or a password hash')
        self.email = email.strip().lower()
        self.password_hash = password_hash or generate_password_hash(password)

    def profile(self):
        return {
            'id': self.ADMIN_ID,
            'name': 'Super Admin',
            'email': self.email,
            'role': 'admin',
            'status': 'Active',
            'avatar': avatar_url('Admin', background='0D8ABC')
        }

    def authenticate(self, email, secret):
        if email.strip().lower() != self.email:
            return None
        if not check_password_hash(self.password_hash, secret):
            return None
        return Identity(self.profile(), 'admin')


class StoreVerifier(CredentialVerifier):

    def __init__(self, store):
        self.store = store

    def authenticate(self, email, secret):
        user = self.store.users.find_one(email=email.strip().lower())
        if not user or not user.get('passwordHash'):
            return None
        if not check_password_hash(user['passwordHash'], secret):
            return None
        return Identity(user, user.get('role') or 'user')


class ChainVerifier(CredentialVerifier):

    def __init__(self, *verifiers):
        self.verifiers = verifiers

    def authenticate(self, email, secret):
        for verifier in self.verifiers:
            identity = verifier.authenticate(email, secret)
            if identity is not None:
                return identity
        return None


class IdentityService:

    def __init__(self, store, admin_verifier, signup_bonus=DEFAULT_SIGNUP_BONUS):
        self.store = store
        self.admin_verifier = admin_verifier
        self.verifier = ChainVerifier(admin_verifier, StoreVerifier(store))
        self.signup_bonus = signup_bonus

    def login(self, data):
        ensure_json_object(data)
        if missing_fields(data, ('email', 'password')):
            raise ValidationError('Email and password are required.')
        email = as_text(data['email'], 'email')
        password = data['password']
        if not isinstance(password, str):
            raise ValidationError('password must be a string.')

        identity = self.verifier.authenticate(email, password)
        if identity is None:
            logger.warning('Failed login attempt for %s', email)
            raise AuthenticationError('Invalid email or password. Please try again.')
        if identity.user.get('status') == 'Banned':
            logger.warning('Banned user %s attempted to log in', identity.user_id)
            raise AuthorizationError('This account has been suspended.')

        logger.info('User %s logged in as %s', identity.user_id, identity.role)
        return Identity(sanitize_user(identity.user), identity.role)

    def signup(self, data):
        ensure_json_object(data)
        if missing_fields(data, ('name', 'email', 'password')):
            raise ValidationError('Name, Email, and Password are required.')
        name = as_text(data['name'], 'name')
        email = as_email(data['email'])
        password = data['password']
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        if email == self.admin_verifier.email:
            raise ConflictError('User with this email already exists.')

        try:
            with self.store.atomic():
                if self.store.users.find_one(email=email):
                    raise ConflictError('User with this email already exists.')
                user = self.store.users.insert({
                    'name': name,
                    'email': email,
                    'passwordHash': generate_password_hash(password),
                    'role': 'user',
                    'status': 'Active',
                    'walletBalance': self.signup_bonus,
                    'joinedAt': date.today().isoformat(),
                    'avatar': avatar_url(name)
                })
        except ConflictError:
            # Also reached when a concurrent signup wins the unique email index
            logger.warning('Signup rejected: %s is already registered', email)
            raise ConflictError('User with this email already exists.')

        logger.info('User %s signed up with a %s point welcome bonus', user['id'], self.signup_bonus)
        return Identity(sanitize_user(user), 'user')

    def current_user(self, user_id, role=None):
        if role == 'admin' and user_id == self.admin_verifier.ADMIN_ID:
            return self.admin_verifier.profile()
        return sanitize_user(self.get_user(user_id))

    def get_user(self, user_id):
        user = self.store.users.get(user_id)
        if user is None:
            raise NotFoundError('User not found')
        return user

    def list_users(self):
        return [sanitize_user(user) for user in self.store.users.list(order_by='-createdAt')]

    def update_user(self, user_id, data):
        ensure_json_object(data)
        reject_unknown(data, EDITABLE_FIELDS, ignored=READ_ONLY_FIELDS)
        changes = {}
        if 'name' in data:
            changes['name'] = as_text(data['name'], 'name')
        if 'email' in data:
            changes['email'] = as_email(data['email'])
            if changes['email'] == self.admin_verifier.email:
                raise ConflictError('User with this email already exists.')
        if 'role' in data:
            changes['role'] = as_choice(data['role'], 'role', USER_ROLES)
        if 'status' in data:
            changes['status'] = as_choice(data['status'], 'status', USER_STATUSES)
        if 'walletBalance' in data:
            changes['walletBalance'] = as_int(data['walletBalance'], 'walletBalance', minimum=0)
        if 'avatar' in data:
            changes['avatar'] = as_text(data['avatar'], 'avatar')

        user_id = canonical_id(user_id)
        with self.store.wallet_lock(user_id), self.store.atomic():
            if 'email' in changes:
                existing = self.store.users.find_one(email=changes['email'])
                if existing and existing['id'] != user_id:
                    raise ConflictError('User with this email already exists.')
            updated = self.store.users.update(user_id, changes)
            if updated is None:
                raise NotFoundError('User not found')

        if changes.get('status') == 'Banned':
            logger.info('User %s banned', user_id)
        else:
            logger.info('User %s updated: %s', user_id, ', '.join(sorted(changes)) or 'no changes')
        return sanitize_user(updated)

    def delete_user(self, user_id):
        with self.store.atomic():
            deleted = self.store.users.delete(user_id)
        if not deleted:
            raise NotFoundError('User not found')
        logger.info('User %s deleted', user_id)
