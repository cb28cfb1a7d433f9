"""
Value converters for loosely typed Phorest payloads

Phorest returns money as numbers or strings, dates as plain dates or full
ISO timestamps with or without offsets. These helpers normalize them and
never raise on bad input.
"""
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

CENT = Decimal('0.01')


def to_decimal(value: Any, default: Decimal = Decimal('0.00')) -> Decimal:
    """
    Convert a money value to a Decimal rounded to cents.

    Examples:
        >>> to_decimal('40')
        Decimal('40.00')
        >>> to_decimal(None)
        Decimal('0.00')
    """
    if value is None or value == '' or isinstance(value, bool):
        return default
    try:
        return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return default


def to_int(value: Any, default: int = 0) -> int:
    """Convert a count to int, falling back to default"""
    if value is None or value == '':
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO date or timestamp into a naive UTC datetime.

    Examples:
        >>> parse_datetime('2024-01-10T14:30:00Z')
        datetime.datetime(2024, 1, 10, 14, 30)
        >>> parse_datetime('2024-01-10')
        datetime.datetime(2024, 1, 10, 0, 0)
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = datetime.strptime(text[:10], '%Y-%m-%d')
            except ValueError:
                return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value: Any) -> Optional[date]:
    """
    Parse the calendar date portion of a date or timestamp.

    Uses the literal date in the string rather than converting to UTC, so a
    salon-local '2024-01-05T23:30:00-05:00' stays on the 5th.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip()[:10], '%Y-%m-%d').date()
    except ValueError:
        return None


def time_of_day(value: Any, default: Optional[str] = None) -> Optional[str]:
    """
    Extract HH:MM from an ISO timestamp or a bare time string.

    Examples:
        >>> time_of_day('2024-01-05T14:30:00')
        '14:30'
        >>> time_of_day('09:15:00')
        '09:15'
    """
    if not value:
        return default
    if isinstance(value, datetime):
        return value.strftime('%H:%M')
    text = str(value).strip()
    if 'T' in text:
        text = text.split('T', 1)[1]
    elif len(text) >= 10 and text[4] == '-':
        parts = text.split(' ', 1)
        if len(parts) < 2:
            return default
        text = parts[1]
    hhmm = text[:5]
    if len(hhmm) == 5 and hhmm[2] == ':' and hhmm.replace(':', '').isdigit():
        return hhmm
    return default
