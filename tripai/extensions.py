from flask import current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate

from .services import BookingService, CatalogService, IdentityService

jwt = JWTManager()
migrate = Migrate()


def get_store():
    return current_app.extensions['tripai.store']


def booking_service():
    return BookingService(get_store(), reward_rate=current_app.config['REWARD_RATE'])


def catalog_service():
    return CatalogService(get_store())


def identity_service():
    return IdentityService(
        get_store(),
        current_app.extensions['tripai.admin_verifier'],
        signup_bonus=current_app.config['SIGNUP_BONUS']
    )
