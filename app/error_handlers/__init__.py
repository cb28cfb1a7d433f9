"""
Unified Error Handling System

Provides centralized, consistent error handling across the application.

Usage:
    from app.error_handlers import handle_errors
    from app.error_handlers.exceptions import ValidationException

    @bp.route('/endpoint')
    @handle_errors
    def my_endpoint():
        if not valid:
            raise ValidationException('Invalid data')
        return jsonify({'success': True})
"""
from .exceptions import (
    AppException,
    ValidationException,
    ConfigurationException,
    DatabaseException,
    ExternalAPIException,
    PhorestAPIError,
    CircuitOpenError
)
from .decorators import handle_errors, requires_phorest_credentials
from .logging import (
    setup_logging,
    register_error_handlers,
    handle_sync_error,
    SyncLogger,
    sync_logger
)


__all__ = [
    # Exceptions
    'AppException',
    'ValidationException',
    'ConfigurationException',
    'DatabaseException',
    'ExternalAPIException',
    'PhorestAPIError',
    'CircuitOpenError',
    # Decorators
    'handle_errors',
    'requires_phorest_credentials',
    # Logging
    'setup_logging',
    'register_error_handlers',
    'handle_sync_error',
    'SyncLogger',
    'sync_logger',
]
