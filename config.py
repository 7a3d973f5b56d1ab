import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()

# Get the absolute path to the instance directory
BASEDIR = os.path.abspath(os.path.dirname(__file__))
INSTANCE_DIR = os.path.join(BASEDIR, 'instance')

class Config:
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        f'sqlite:///{os.path.join(INSTANCE_DIR, "tripai.db")}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {
            'check_same_thread': False
        }
    } if SQLALCHEMY_DATABASE_URI.startswith('sqlite') else {}

    # 'sql' persists through SQLAlchemy, 'memory' keeps everything in process
    STORE_BACKEND = os.getenv('STORE_BACKEND', 'sql')

    # Security
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')

    # JWT
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt-secret-key')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    JWT_TOKEN_LOCATION = ['headers']

    # Super-admin account, checked before the users table
    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL', 'admin@tripai.com')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', 'admin123')

    # Wallet
    SIGNUP_BONUS = int(os.getenv('SIGNUP_BONUS', 500))
    REWARD_RATE = float(os.getenv('REWARD_RATE', 0.05))

    # API
    API_PORT = int(os.getenv('API_PORT', 8000))
    API_HOST = os.getenv('API_HOST', '0.0.0.0')

    # CORS
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',')
    CORS_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS']
    CORS_HEADERS = ['Content-Type', 'Authorization']
    CORS_SUPPORTS_CREDENTIALS = True
    CORS_MAX_AGE = 3600


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    STORE_BACKEND = 'sql'
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    ADMIN_EMAIL = 'admin@tripai.com'
    ADMIN_PASSWORD = 'admin123'
    SIGNUP_BONUS = 500
    REWARD_RATE = 0.05
