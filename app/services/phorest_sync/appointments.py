"""
Appointment synchronization
"""
import logging
from typing import Any, Dict, Optional

from app.models import get_models
from app.utils.converters import parse_date, time_of_day, to_decimal
from app.utils.db_helpers import upsert_row

logger = logging.getLogger(__name__)

STATUS_MAP = {
    'CONFIRMED': 'confirmed',
    'CHECKED_IN': 'checked_in',
    'STARTED': 'in_progress',
    'IN_PROGRESS': 'in_progress',
    'COMPLETED': 'completed',
    'CANCELLED': 'cancelled',
    'NO_SHOW': 'no_show',
}


def map_status(phorest_status: Optional[str]) -> str:
    """
    Normalize a Phorest appointment status.

    Known values map to the dashboard vocabulary; anything else is
    lower-cased and passed through. Only an empty status becomes 'unknown'.

    Examples:
        >>> map_status('STARTED')
        'in_progress'
        >>> map_status('PAYMENT_PENDING')
        'payment_pending'
        >>> map_status(None)
        'unknown'
    """
    if phorest_status is None:
        return 'unknown'
    text = str(phorest_status).strip()
    if not text:
        return 'unknown'
    return STATUS_MAP.get(text.upper(), text.lower())


def build_appointment_values(apt: Dict[str, Any], identity, locations=None) -> Dict[str, Any]:
    """Column values for one Phorest appointment"""
    client = apt.get('client') or {}
    services = apt.get('services') or []
    first_service = services[0] if services and isinstance(services[0], dict) else {}

    client_name = apt.get('clientName') or \
        f"{client.get('firstName') or ''} {client.get('lastName') or ''}".strip()
    start = apt.get('startTime')
    branch_id = apt.get('branchId')

    return {
        'stylist_user_id': identity.resolve(apt.get('staffId')),
        'phorest_staff_id': str(apt['staffId']) if apt.get('staffId') else None,
        'phorest_client_id': apt.get('clientId') or client.get('clientId'),
        'location_id': locations.resolve(branch_id) if locations and branch_id else None,
        'client_name': client_name or None,
        'client_phone': client.get('mobile') or client.get('phone'),
        'appointment_date': parse_date(apt.get('appointmentDate') or start),
        'start_time': time_of_day(start, '09:00'),
        'end_time': time_of_day(apt.get('endTime'), '10:00'),
        'service_name': first_service.get('name') or apt.get('serviceName') or 'Unknown Service',
        'service_category': first_service.get('category') or apt.get('serviceCategory'),
        'status': map_status(apt.get('status') or apt.get('activationState')),
        'total_price': to_decimal(apt.get('totalPrice') or apt.get('price'), default=None),
        'is_new_client': bool(apt.get('newClient') or apt.get('isNewClient')),
        'notes': apt.get('notes'),
    }


def sync_appointments(gateway, identity, date_from, date_to, locations=None) -> Dict[str, Any]:
    """
    Pull appointments in [date_from, date_to] and upsert them by Phorest id.

    Returns:
        dict: total fetched, synced (successful upserts) and the window
    """
    logger.info(f"Syncing appointments from {date_from} to {date_to}")
    appointments = gateway.list_appointments(date_from, date_to)
    logger.info(f"Found {len(appointments)} appointments")

    Appointment = get_models()['Appointment']
    synced = 0
    for apt in appointments:
        phorest_id = apt.get('appointmentId') or apt.get('id') if isinstance(apt, dict) else None
        if not phorest_id:
            logger.warning("Skipping appointment without an id")
            continue

        values = build_appointment_values(apt, identity, locations)
        if upsert_row(Appointment, {'phorest_id': str(phorest_id)}, values):
            synced += 1

    return {
        'total': len(appointments),
        'synced': synced,
        'date_from': date_from.isoformat(),
        'date_to': date_to.isoformat(),
    }
