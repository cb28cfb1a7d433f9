"""
Configuration management for the Phorest sync service
Handles environment-based settings and Phorest API configuration

Uses the lazy validation pattern so development and tests run without
Phorest credentials; production validates them on demand.
"""
import secrets
from decouple import config
from typing import Optional


class Config:
    """Base configuration class"""
    # Flask settings
    SECRET_KEY = config('SECRET_KEY', default=secrets.token_hex(32))
    SQLALCHEMY_DATABASE_URI = config('DATABASE_URL', default='sqlite:///instance/phorest_sync.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Phorest third-party API settings
    PHOREST_BASE_URL = config(
        'PHOREST_BASE_URL',
        default='https://platform.phorest.com/third-party-api-server/api'
    )
    PHOREST_BUSINESS_ID = config('PHOREST_BUSINESS_ID', default='')
    PHOREST_USERNAME = config('PHOREST_USERNAME', default='')
    PHOREST_API_KEY = config('PHOREST_API_KEY', default='')
    PHOREST_TIMEOUT = config('PHOREST_TIMEOUT', default=30, cast=int)
    PHOREST_MAX_RETRIES = config('PHOREST_MAX_RETRIES', default=3, cast=int)
    PHOREST_BACKOFF_FACTOR = config('PHOREST_BACKOFF_FACTOR', default=1.0, cast=float)
    PHOREST_CIRCUIT_BREAKER_THRESHOLD = config('PHOREST_CIRCUIT_BREAKER_THRESHOLD', default=3, cast=int)

    # Sync settings
    PHOREST_CLIENT_PAGE_SIZE = config('PHOREST_CLIENT_PAGE_SIZE', default=500, cast=int)
    PHOREST_SYNC_MAX_WORKERS = config('PHOREST_SYNC_MAX_WORKERS', default=1, cast=int)
    APPOINTMENT_WINDOW_DAYS = config('APPOINTMENT_WINDOW_DAYS', default=7, cast=int)
    SALES_LOOKBACK_DAYS = config('SALES_LOOKBACK_DAYS', default=30, cast=int)

    # Background worker settings
    CELERY_BROKER_URL = config('CELERY_BROKER_URL', default='redis://localhost:6379/0')
    CELERY_RESULT_BACKEND = config('CELERY_RESULT_BACKEND', default='redis://localhost:6379/0')

    # Logging settings
    LOG_LEVEL = config('LOG_LEVEL', default='INFO')
    LOG_FILE = config('LOG_FILE', default='logs/phorest_sync.log')

    # Rate limiting for the sync trigger
    RATELIMIT_ENABLED = config('RATELIMIT_ENABLED', default=True, cast=bool)
    RATELIMIT_DEFAULT = config('RATELIMIT_DEFAULT', default='100 per hour')
    RATELIMIT_SYNC = config('RATELIMIT_SYNC', default='30 per hour')

    @classmethod
    def validate(cls) -> None:
        """
        Validate configuration - can be called explicitly or on-demand

        Raises:
            ValueError: If required configuration is missing
        """
        pass  # Base config has no required validation


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    RATELIMIT_ENABLED = False
    LOG_FILE = 'logs/phorest_sync_test.log'

    # Deterministic credentials so the gateway is always configurable in tests
    PHOREST_BASE_URL = 'https://phorest.test/api'
    PHOREST_BUSINESS_ID = 'biz-test'
    PHOREST_USERNAME = 'sync@example.com'
    PHOREST_API_KEY = 'test-key'
    PHOREST_MAX_RETRIES = 0


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    SECRET_KEY = config('SECRET_KEY', default='change-this-to-a-random-secret-key-in-production')

    # Database Connection Pool (for production databases)
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': config('DB_POOL_SIZE', default=10, cast=int),
        'pool_recycle': config('DB_POOL_RECYCLE', default=3600, cast=int),
        'pool_pre_ping': True,
        'max_overflow': config('DB_MAX_OVERFLOW', default=20, cast=int),
    }

    LOG_LEVEL = config('LOG_LEVEL', default='WARNING')

    @classmethod
    def validate(cls) -> None:
        """
        Production mode: validate all required settings

        Raises:
            ValueError: If any required configuration is missing
        """
        try:
            secret_key = config('SECRET_KEY')
        except Exception:
            raise ValueError(
                "SECRET_KEY environment variable must be set in production. "
                "Generate a secure key with: python -c 'import secrets; print(secrets.token_hex(32))'"
            )

        if len(secret_key) < 32:
            raise ValueError(
                f"SECRET_KEY must be at least 32 characters in production (current: {len(secret_key)})."
            )

        phorest_vars = {
            'PHOREST_BUSINESS_ID': cls.PHOREST_BUSINESS_ID,
            'PHOREST_USERNAME': cls.PHOREST_USERNAME,
            'PHOREST_API_KEY': cls.PHOREST_API_KEY,
        }
        missing = [var for var, value in phorest_vars.items() if not value]
        if missing:
            raise ValueError(
                f"Phorest sync requires: {', '.join(missing)}. "
                f"Please set these in your .env file."
            )


# Configuration mapping
config_mapping = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: Optional[str] = None, validate: bool = False) -> type:
    """
    Get configuration class based on environment.

    Args:
        config_name: Environment name ('development', 'testing', 'production')
        validate: Whether to validate configuration immediately (default: False)

    Returns:
        Config class for the specified environment

    Raises:
        ValueError: If validation is enabled and required variables are missing
    """
    if config_name is None:
        config_name = config('FLASK_ENV', default='development')

    config_class = config_mapping.get(config_name, DevelopmentConfig)

    if validate:
        config_class.validate()

    return config_class
