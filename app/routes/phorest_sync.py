"""
Phorest Sync Routes
===================

HTTP surface for the Phorest sync: trigger a sync, read recent sync log
entries and check the API connection.
"""
from flask import Blueprint, jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import limiter
from app.error_handlers import handle_errors, requires_phorest_credentials
from app.error_handlers.exceptions import DatabaseException, ValidationException
from app.integrations.phorest import phorest_gateway
from app.models import get_models
from app.services.phorest_sync import run_sync
from app.utils.validators import validate_sync_request

phorest_sync_bp = Blueprint('phorest_sync', __name__, url_prefix='/api/phorest')

MAX_LOG_LIMIT = 200


def _sync_rate_limit():
    return current_app.config.get('RATELIMIT_SYNC', '30 per hour')


@phorest_sync_bp.route('/sync', methods=['POST'])
@limiter.limit(_sync_rate_limit)
@handle_errors
@requires_phorest_credentials
def trigger_sync():
    """
    Run a Phorest sync synchronously.

    Request JSON:
        {
            "sync_type": "staff|appointments|clients|reports|sales|all",
            "date_from": "YYYY-MM-DD",   # optional
            "date_to": "YYYY-MM-DD",     # optional
            "quick": true                # optional
        }

    Returns:
        {
            "success": true,
            "results": {"<entity>": {...} | {"error": "..."}}
        }
    """
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationException('Request body must be valid JSON')

    params = validate_sync_request(data)
    current_app.logger.info(
        f"Phorest sync requested: {params['sync_type']} (quick={params['quick']})"
    )

    results = run_sync(
        params['sync_type'],
        date_from=params['date_from'],
        date_to=params['date_to'],
        quick=params['quick'],
    )

    return jsonify({'success': True, 'results': results})


@phorest_sync_bp.route('/sync/logs', methods=['GET'])
@handle_errors
def sync_logs():
    """Most recent sync log entries, newest first (?limit=50, ?sync_type=)"""
    limit = request.args.get('limit', 50, type=int)
    if limit is None or limit < 1:
        raise ValidationException('limit must be a positive integer')
    limit = min(limit, MAX_LOG_LIMIT)

    SyncLog = get_models()['SyncLog']
    query = SyncLog.query
    sync_type = request.args.get('sync_type')
    if sync_type:
        query = query.filter_by(sync_type=sync_type)

    try:
        logs = query.order_by(SyncLog.started_at.desc(), SyncLog.id.desc()).limit(limit).all()
    except SQLAlchemyError as e:
        raise DatabaseException(f'Failed to load sync logs: {str(e)}')

    return jsonify({
        'success': True,
        'count': len(logs),
        'logs': [log.to_dict() for log in logs],
    })


@phorest_sync_bp.route('/connection', methods=['GET'])
@handle_errors
def connection_status():
    """Check the Phorest credentials by listing branches"""
    result = phorest_gateway.check_connection()
    status_code = 200 if result.get('connected') else 503
    return jsonify(result), status_code
