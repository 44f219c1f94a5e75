"""Configuration module for the storefront Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')

    # Session cookie carries the client id that namespaces the durable state
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    PERMANENT_SESSION_LIFETIME = 60 * 60 * 24 * 365  # one year

    # Durable state store
    # 'sql' keeps entries in the stored_state table, 'redis' keeps them in Redis
    STATE_BACKEND = os.getenv('STATE_BACKEND', 'sql').lower()
    STATE_KEY_PREFIX = os.getenv('STATE_KEY_PREFIX', 'shadowwear')

    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///storefront_state.db')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', '0') == '1'

    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    REDIS_SOCKET_TIMEOUT = float(os.getenv('REDIS_SOCKET_TIMEOUT', '3'))

    # Storefront documents (paths or http(s) URLs)
    CATALOG_SOURCE = os.getenv('CATALOG_SOURCE', 'products.json')
    SETTINGS_SOURCE = os.getenv('SETTINGS_SOURCE', 'content/settings.json')
    DOCUMENT_TIMEOUT = float(os.getenv('DOCUMENT_TIMEOUT', '10'))

    # Shop defaults, used when the settings document omits a field
    DEFAULT_SHIPPING_FLAT = os.getenv('DEFAULT_SHIPPING_FLAT', '30')
    DEFAULT_FREE_SHIPPING_THRESHOLD = os.getenv('DEFAULT_FREE_SHIPPING_THRESHOLD', '500')
    DEFAULT_CURRENCY = os.getenv('DEFAULT_CURRENCY', 'MAD')
    OWNER_PHONE_E164 = os.getenv('OWNER_PHONE_E164', '212696952145')

    # Error tracking (production only)
    SENTRY_DSN = os.getenv('SENTRY_DSN')
