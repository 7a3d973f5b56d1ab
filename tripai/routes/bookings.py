from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt, jwt_required

from ..auth import admin_required, ensure_self_or_admin
from ..errors import AuthorizationError
from ..extensions import booking_service

bookings_bp = Blueprint('bookings', __name__)


@bookings_bp.route('', methods=['GET'])
@jwt_required()
def get_bookings():
    """Admin: every booking. User: their own, via ?userId=."""
    user_id = request.args.get('userId') or None
    if user_id is not None:
        ensure_self_or_admin(user_id)
    elif get_jwt().get('role') != 'admin':
        raise AuthorizationError('Admin access required.')

    bookings = booking_service().list_bookings(user_id)
    current_app.logger.info('Successfully fetched %d bookings', len(bookings))
    return jsonify(bookings), 200


@bookings_bp.route('', methods=['POST'])
def create_booking():
    data = request.get_json(silent=True)
    # Guests may book without a token; wallet bookings must belong to the caller
    if isinstance(data, dict) and data.get('userId') is not None:
        ensure_self_or_admin(data['userId'])

    booking, updated_balance = booking_service().create_booking(data)

    message = 'Booking confirmed!' if booking['status'] == 'Confirmed' else 'Booking reserved. Payment pending.'
    return jsonify({
        'success': True,
        'message': message,
        'booking': booking,
        'updatedBalance': updated_balance
    }), 201


@bookings_bp.route('/<booking_id>', methods=['GET'])
@jwt_required()
def get_booking(booking_id):
    booking = booking_service().get_booking(booking_id)
    if booking['userId'] is not None:
        ensure_self_or_admin(booking['userId'])
    elif get_jwt().get('role') != 'admin':
        raise AuthorizationError('Admin access required.')
    return jsonify(booking), 200


@bookings_bp.route('/<booking_id>', methods=['PUT'])
@admin_required
def update_booking(booking_id):
    booking = booking_service().update_booking(booking_id, request.get_json(silent=True))
    return jsonify(booking), 200


@bookings_bp.route('/<booking_id>', methods=['DELETE'])
@admin_required
def delete_booking(booking_id):
    booking_service().delete_booking(booking_id)
    return jsonify({'success': True, 'message': 'Booking deleted'}), 200
