"""
Error handling decorators

Provides decorators for consistent error handling across endpoints.
"""
from functools import wraps
from flask import jsonify, current_app
from datetime import datetime
from .exceptions import AppException, ConfigurationException


def handle_errors(f):
    """
    Universal error handler decorator - use on all endpoints

    Provides:
    - Consistent JSON error responses
    - Automatic logging with error IDs
    - Exception type hierarchy support

    Usage:
        @bp.route('/endpoint')
        @handle_errors
        def my_endpoint():
            if not valid:
                raise ValidationException('Invalid input')
            return jsonify({'success': True})
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)

        except AppException as e:
            current_app.logger.warning(
                f"{e.error_type} in {f.__name__}: {e.message}",
                extra={'details': e.details} if e.details else {}
            )
            return jsonify(e.to_dict()), e.status_code

        except Exception as e:
            error_id = datetime.utcnow().strftime('%Y%m%d_%H%M%S_%f')

            current_app.logger.error(
                f"Unexpected error [{error_id}] in {f.__name__}: {str(e)}",
                exc_info=True
            )

            return jsonify({
                'error': 'An unexpected error occurred',
                'error_type': 'InternalError',
                'error_id': error_id,
                'status_code': 500
            }), 500

    return decorated


def requires_phorest_credentials(f):
    """
    Decorator to check that Phorest credentials are configured

    Raises ConfigurationException (HTTP 400) when any of business id,
    username or API key is missing. Use beneath @handle_errors:

        @handle_errors
        @requires_phorest_credentials
        def trigger_sync():
            ...
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        cfg = current_app.config
        if not all([cfg.get('PHOREST_BUSINESS_ID'), cfg.get('PHOREST_USERNAME'), cfg.get('PHOREST_API_KEY')]):
            current_app.logger.warning(
                f"Sync operation {f.__name__} attempted without Phorest credentials"
            )
            raise ConfigurationException('Phorest API credentials not configured', status_code=400)
        return f(*args, **kwargs)
    return decorated_function
