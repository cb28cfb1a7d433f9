"""
Validation utilities for the sync trigger API
Provides reusable validation functions for request payloads
"""
from datetime import datetime, date
from typing import Any, Dict, Optional

from app.error_handlers.exceptions import ValidationException

SYNC_TYPES = ('staff', 'appointments', 'clients', 'reports', 'sales', 'all')


def validate_date_param(date_str: str, param_name: str = 'date') -> date:
    """
    Validate and parse date parameter from string.

    Args:
        date_str: Date string in YYYY-MM-DD format
        param_name: Name of parameter for error messages (default: 'date')

    Returns:
        date: Parsed date object

    Raises:
        ValidationException: If date format is invalid

    Examples:
        >>> validate_date_param('2025-10-15')
        date(2025, 10, 15)
    """
    try:
        return datetime.strptime(str(date_str), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationException(
            f"Invalid {param_name} format. Use YYYY-MM-DD (e.g., 2025-10-15)"
        )


def validate_sync_request(data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Validate a sync trigger payload.

    Args:
        data: Parsed JSON body

    Returns:
        dict: sync_type, date_from, date_to (date or None) and quick (bool)

    Raises:
        ValidationException: If the body is missing, sync_type is unknown,
            a date is malformed or date_from is after date_to
    """
    if not isinstance(data, dict):
        raise ValidationException('Request body must be a JSON object')

    sync_type = data.get('sync_type')
    if sync_type not in SYNC_TYPES:
        raise ValidationException(
            f"Invalid sync_type: {sync_type!r}. Expected one of: {', '.join(SYNC_TYPES)}"
        )

    date_from = validate_date_param(data['date_from'], 'date_from') if data.get('date_from') else None
    date_to = validate_date_param(data['date_to'], 'date_to') if data.get('date_to') else None
    if date_from and date_to and date_from > date_to:
        raise ValidationException('date_from must be on or before date_to')

    quick = data.get('quick', False)
    if not isinstance(quick, bool):
        raise ValidationException('quick must be a boolean')

    return {
        'sync_type': sync_type,
        'date_from': date_from,
        'date_to': date_to,
        'quick': quick,
    }
