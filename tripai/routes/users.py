from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from ..auth import admin_required, ensure_self_or_admin
from ..extensions import identity_service
from ..services import sanitize_user

users_bp = Blueprint('users', __name__)


@users_bp.route('', methods=['GET'])
@admin_required
def get_users():
    users = identity_service().list_users()
    current_app.logger.info('Successfully fetched %d users', len(users))
    return jsonify(users), 200


@users_bp.route('/<user_id>', methods=['GET'])
@jwt_required()
def get_user(user_id):
    ensure_self_or_admin(user_id)
    return jsonify(sanitize_user(identity_service().get_user(user_id))), 200


@users_bp.route('/<user_id>', methods=['PUT'])
@admin_required
def update_user(user_id):
    user = identity_service().update_user(user_id, request.get_json(silent=True))
    return jsonify(user), 200


@users_bp.route('/<user_id>', methods=['DELETE'])
@admin_required
def delete_user(user_id):
    identity_service().delete_user(user_id)
    return jsonify({'success': True, 'message': 'User deleted'}), 200
