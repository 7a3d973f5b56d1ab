import os
import traceback

import click
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Config
from .auth import register_jwt_handlers
from .errors import TripAIError
from .extensions import jwt, migrate
from .models import db
from .routes import register_routes
from .services import AdminVerifier
from .store import build_store


def create_app(config_class=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    # Configure CORS with credentials support
    CORS(app,
         resources={r"/api/*": {
             "origins": app.config['CORS_ORIGINS'],
             "methods": app.config['CORS_METHODS'],
             "allow_headers": app.config['CORS_HEADERS'],
             "supports_credentials": app.config['CORS_SUPPORTS_CREDENTIALS'],
             "max_age": app.config['CORS_MAX_AGE'],
             "expose_headers": ["Authorization"]
         }})

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') and not app.testing:
        os.makedirs(app.instance_path, exist_ok=True)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    register_jwt_handlers(jwt)

    app.extensions['tripai.store'] = build_store(app.config['STORE_BACKEND'])
    app.extensions['tripai.admin_verifier'] = AdminVerifier(
        app.config['ADMIN_EMAIL'], password=app.config['ADMIN_PASSWORD']
    )

    register_routes(app)
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/api/health')
    def health_check():
        return jsonify({"status": "healthy"}), 200

    @app.cli.command('init-db')
    def init_db():
        """Create the database tables."""
        db.create_all()
        click.echo('Database tables created')

    return app


def register_error_handlers(app):
    @app.errorhandler(TripAIError)
    def handle_tripai_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        app.logger.error('Unhandled error: %s\n%s', str(error), traceback.format_exc())
        return jsonify({'error': 'Internal Server Error. Please try again later.'}), 500
