from flask import current_app, request

from tripai.routes.auth import auth_bp
from tripai.routes.bookings import bookings_bp
from tripai.routes.destinations import destinations_bp
from tripai.routes.users import users_bp

__all__ = ['auth_bp', 'bookings_bp', 'destinations_bp', 'users_bp', 'register_routes']


def log_request_info():
    current_app.logger.info('Request Method: %s', request.method)
    current_app.logger.info('Request Path: %s', request.path)


def register_routes(app):
    app.before_request(log_request_info)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(destinations_bp, url_prefix='/api/destinations')
    app.register_blueprint(bookings_bp, url_prefix='/api/bookings')
    app.register_blueprint(users_bp, url_prefix='/api/users')
