"""
Health Check and Monitoring Endpoints
Provides endpoints for application health monitoring, readiness checks and
process metrics.
"""
from flask import Blueprint, jsonify, current_app
from datetime import datetime
from sqlalchemy import text
import sys
import psutil
import os

health_bp = Blueprint('health', __name__, url_prefix='/health')


@health_bp.route('/ping', methods=['GET'])
def ping():
    """
    Simple ping endpoint for basic connectivity checks.
    Returns: 200 OK with pong message
    """
    return jsonify({
        'status': 'ok',
        'message': 'pong',
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@health_bp.route('/live', methods=['GET'])
def liveness():
    """
    Liveness probe - checks if application is running.

    Returns:
        200: Application is alive
    """
    return jsonify({
        'status': 'alive',
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness():
    """
    Readiness probe - checks the database and that Phorest credentials are set.

    Returns:
        200: Application is ready
        503: Application is not ready
    """
    checks = {
        'database': False,
        'phorest_configured': False,
    }
    errors = []

    try:
        db = current_app.extensions['sqlalchemy']
        db.session.execute(text('SELECT 1'))
        checks['database'] = True
    except Exception as e:
        errors.append(f"Database: {str(e)}")

    from app.integrations.phorest import phorest_gateway
    checks['phorest_configured'] = phorest_gateway.is_configured
    if not checks['phorest_configured']:
        errors.append('Phorest: API credentials not configured')

    all_checks_passed = all(checks.values())
    status_code = 200 if all_checks_passed else 503

    response = {
        'status': 'ready' if all_checks_passed else 'not_ready',
        'checks': checks,
        'timestamp': datetime.utcnow().isoformat()
    }

    if errors:
        response['errors'] = errors

    return jsonify(response), status_code


@health_bp.route('/status', methods=['GET'])
def status():
    """
    Detailed application status: process resources and the latest sync
    outcome per entity type.

    Returns:
        200: Status information
    """
    try:
        process = psutil.Process()
        memory_info = process.memory_info()

        from app.models import get_models
        SyncLog = get_models()['SyncLog']
        last_syncs = {}
        for sync_type in ('staff', 'appointments', 'clients', 'reports', 'sales'):
            latest = SyncLog.query.filter_by(sync_type=sync_type) \
                .order_by(SyncLog.started_at.desc(), SyncLog.id.desc()).first()
            last_syncs[sync_type] = latest.to_dict() if latest else None

        status_info = {
            'status': 'operational',
            'timestamp': datetime.utcnow().isoformat(),
            'application': {
                'name': 'Phorest Sync Service',
                'version': current_app.config.get('VERSION', 'unknown'),
                'debug': current_app.debug,
            },
            'system': {
                'python_version': sys.version,
                'platform': sys.platform,
                'process_id': os.getpid(),
            },
            'resources': {
                'memory': {
                    'used_mb': round(memory_info.rss / 1024 / 1024, 2),
                    'percent': round(process.memory_percent(), 2),
                },
            },
            'database': {
                'type': 'sqlite' if 'sqlite' in current_app.config.get('SQLALCHEMY_DATABASE_URI', '') else 'postgresql',
            },
            'last_syncs': last_syncs,
        }

        return jsonify(status_info), 200

    except Exception as e:
        current_app.logger.error(f"Status check failed: {str(e)}")
        return jsonify({
            'status': 'error',
            'error': str(e),
            'timestamp': datetime.utcnow().isoformat()
        }), 500
