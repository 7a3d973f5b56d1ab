from flask import Blueprint, current_app, jsonify, request

from ..auth import admin_required
from ..extensions import catalog_service

destinations_bp = Blueprint('destinations', __name__)

TRUTHY = ('1', 'true', 'yes')


@destinations_bp.route('', methods=['GET'])
def get_destinations():
    featured = request.args.get('featured')
    if featured is not None:
        featured = featured.lower() in TRUTHY

    destinations = catalog_service().list_destinations(
        destination_type=request.args.get('type'),
        featured=featured
    )
    current_app.logger.info('Found %d destinations', len(destinations))
    return jsonify(destinations), 200


@destinations_bp.route('', methods=['POST'])
@admin_required
def create_destination():
    destination = catalog_service().create_destination(request.get_json(silent=True))

    return jsonify({
        'success': True,
        'message': 'Destination added successfully!',
        'data': destination
    }), 201


@destinations_bp.route('/<destination_id>', methods=['GET'])
def get_destination(destination_id):
    return jsonify(catalog_service().get_destination(destination_id)), 200


@destinations_bp.route('/<destination_id>', methods=['PUT'])
@admin_required
def update_destination(destination_id):
    destination = catalog_service().update_destination(destination_id, request.get_json(silent=True))
    return jsonify(destination), 200


@destinations_bp.route('/<destination_id>', methods=['DELETE'])
@admin_required
def delete_destination(destination_id):
    catalog_service().delete_destination(destination_id)
    return jsonify({'success': True, 'message': 'Destination deleted'}), 200
