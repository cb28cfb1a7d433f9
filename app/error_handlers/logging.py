"""
Error handling and logging utilities for the Phorest sync service
Provides centralized error handling, logging, and sync operation tracing
"""
import logging
import traceback
from datetime import datetime
from flask import jsonify, request
import os

SERVICE_LOGGERS = ('sync', 'app.integrations.phorest', 'app.services.phorest_sync')


def _install_handlers(logger, *handlers):
    """
    Attach handlers, replacing any installed by an earlier setup_logging call.

    Loggers are process-wide, so building a second app must not stack a
    second set of handlers on them.
    """
    for handler in [h for h in logger.handlers if getattr(h, '_phorest_sync', False)]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler._phorest_sync = True
        logger.addHandler(handler)


def setup_logging(app):
    """Configure application logging"""
    log_level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO').upper())
    log_file = app.config.get('LOG_FILE', 'phorest_sync.log')

    # Make log file path absolute if it's not
    if not os.path.isabs(log_file):
        basedir = os.path.abspath(os.path.dirname(os.path.dirname(os.path.dirname(__file__))))
        log_file = os.path.join(basedir, log_file)

    log_dir = os.path.dirname(log_file)
    os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    app.logger.setLevel(log_level)
    _install_handlers(app.logger, file_handler, console_handler)

    # Sync and gateway loggers share the app handlers
    for name in SERVICE_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(log_level)
        _install_handlers(logger, file_handler, console_handler)
        logger.propagate = False

    werkzeug_logger = logging.getLogger('werkzeug')
    werkzeug_logger.setLevel(log_level)

    return app.logger


def register_error_handlers(app):
    """Register global JSON error handlers for the Flask app"""

    @app.errorhandler(400)
    def bad_request_error(error):
        """Handle 400 Bad Request errors"""
        app.logger.warning(f"Bad request from {request.remote_addr}: {request.url}")
        return jsonify({
            'error': 'The request could not be understood by the server',
            'status_code': 400
        }), 400

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 Not Found errors"""
        app.logger.info(f"404 Not Found: {request.url} from {request.remote_addr}")
        return jsonify({
            'error': 'The requested resource was not found',
            'status_code': 404
        }), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        """Handle 405 Method Not Allowed errors"""
        app.logger.warning(f"Method not allowed: {request.method} {request.url} from {request.remote_addr}")
        return jsonify({
            'error': f'The {request.method} method is not allowed for this endpoint',
            'status_code': 405
        }), 405

    @app.errorhandler(429)
    def rate_limited_error(error):
        """Handle 429 Too Many Requests from Flask-Limiter"""
        app.logger.warning(f"Rate limit exceeded: {request.url} from {request.remote_addr}")
        return jsonify({
            'error': f'Rate limit exceeded: {error.description}',
            'status_code': 429
        }), 429

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error"""
        error_id = datetime.utcnow().strftime('%Y%m%d_%H%M%S_%f')
        app.logger.error(f"Internal Server Error [{error_id}]: {str(error)}")
        app.logger.error(f"Traceback [{error_id}]: {traceback.format_exc()}")
        app.logger.error(f"Request details [{error_id}]: {request.method} {request.url}")

        return jsonify({
            'error': 'An unexpected error occurred',
            'error_id': error_id,
            'status_code': 500
        }), 500


def handle_sync_error(operation, error, context=None):
    """Centralized sync error handling"""
    logger = logging.getLogger('sync')
    error_id = datetime.utcnow().strftime('%Y%m%d_%H%M%S_%f')

    log_message = f"SYNC ERROR [{error_id}] in {operation}: {str(error)}"
    if context:
        log_message += f" | Context: {context}"

    logger.error(log_message)
    logger.debug(f"SYNC ERROR TRACEBACK [{error_id}]: {traceback.format_exc()}")

    return {
        'error_id': error_id,
        'operation': operation,
        'error_message': str(error),
        'timestamp': datetime.utcnow().isoformat()
    }


class SyncLogger:
    """Specialized logger for sync operations"""

    def __init__(self, name='sync'):
        self.logger = logging.getLogger(name)

    def sync_started(self, operation, details=None):
        """Log sync operation start"""
        message = f"Started: {operation}"
        if details:
            message += f" | {details}"
        self.logger.info(message)

    def sync_completed(self, operation, stats=None):
        """Log sync operation completion"""
        message = f"Completed: {operation}"
        if stats:
            message += f" | Stats: {stats}"
        self.logger.info(message)

    def sync_failed(self, operation, error, context=None):
        """Log sync operation failure, returns the error id"""
        error_details = handle_sync_error(operation, error, context)
        return error_details['error_id']

    def sync_warning(self, operation, message):
        """Log sync warnings"""
        self.logger.warning(f"{operation}: {message}")


# Global sync logger instance
sync_logger = SyncLogger()
