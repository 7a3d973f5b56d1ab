from functools import wraps

from flask import jsonify
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, verify_jwt_in_request

from .errors import AuthenticationError, AuthorizationError
from .store import canonical_id


def issue_token(identity):
    """Signed access token carrying the user id as subject and the role as a claim."""
    return create_access_token(
        identity=str(identity.user_id),
        additional_claims={'role': identity.role}
    )


def current_caller():
    """(user_id, role) from the bearer token, or (None, None) when there is none."""
    verify_jwt_in_request(optional=True)
    user_id = get_jwt_identity()
    if user_id is None:
        return None, None
    return user_id, get_jwt().get('role')


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        if get_jwt().get('role') != 'admin':
            raise AuthorizationError('Admin access required.')
        return fn(*args, **kwargs)
    return wrapper


def ensure_self_or_admin(user_id):
    caller_id, role = current_caller()
    if caller_id is None:
        raise AuthenticationError('Authentication required.')
    if role != 'admin' and canonical_id(user_id) != caller_id:
        raise AuthorizationError('You can only act on your own account.')
    return caller_id, role


def register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'error': 'Authentication required.'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'error': 'Invalid token.'}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Token has expired.'}), 401
