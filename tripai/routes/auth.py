from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required

from ..auth import issue_token
from ..extensions import identity_service

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    identity = identity_service().login(request.get_json(silent=True))

    return jsonify({
        'success': True,
        'message': 'Logged in successfully',
        'role': identity.role,
        'token': issue_token(identity),
        'user': identity.user
    }), 200


@auth_bp.route('/signup', methods=['POST'])
def signup():
    identity = identity_service().signup(request.get_json(silent=True))

    return jsonify({
        'success': True,
        'message': 'Account created successfully!',
        'token': issue_token(identity),
        'user': identity.user
    }), 201


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    current_user_id = get_jwt_identity()
    user = identity_service().current_user(current_user_id, get_jwt().get('role'))

    current_app.logger.info('Profile retrieved for user %s', current_user_id)
    return jsonify({
        'message': 'Profile retrieved successfully',
        'user': user
    }), 200
