"""Configuration module for Flask application."""
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
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Session Configuration (Production-safe defaults)
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')

    # Catalog database (restaurants, menu items, variants)
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///foodcart.db')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Cart persistence
    # 'redis' keeps one key per cart session, 'memory' keeps carts in-process
    CART_STORE = os.getenv('CART_STORE', 'redis')
    REDIS_URL = os.getenv('REDIS_URL', 'redis://redis:6379/0')
    CACHE_KEY_PREFIX = os.getenv('CACHE_KEY_PREFIX', 'foodcart')
    CART_TTL_SECONDS = int(os.getenv('CART_TTL_SECONDS', str(60 * 60 * 6)))  # 6 hours

    # Checkout
    DEFAULT_PAYMENT_METHOD = os.getenv('DEFAULT_PAYMENT_METHOD', 'cash')


class TestConfig(Config):
    """Configuration used by the test suite."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    CART_STORE = 'memory'
