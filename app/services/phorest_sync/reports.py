"""
Weekly staff performance report synchronization
"""
import logging
from datetime import timedelta
from typing import Any, Dict

from app.models import get_models
from app.utils.converters import to_decimal, to_int
from app.utils.db_helpers import upsert_row

logger = logging.getLogger(__name__)


def _rate(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def sync_performance_reports(gateway, identity, week_start) -> Dict[str, Any]:
    """
    Pull the staff performance report for the week starting ``week_start``.

    Rows for staff with no identity mapping are skipped. Re-running a week
    overwrites the stored figures.
    """
    week_end = week_start + timedelta(days=6)
    logger.info(f"Syncing performance reports for week {week_start} to {week_end}")

    rows = gateway.staff_performance_report(week_start, week_end)
    logger.info(f"Found performance data for {len(rows)} staff")

    PerformanceMetric = get_models()['PerformanceMetric']
    synced = 0
    skipped = 0
    for perf in rows:
        if not isinstance(perf, dict):
            continue
        user_id = identity.resolve(perf.get('staffId'))
        if not user_id:
            skipped += 1
            continue

        values = {
            'phorest_staff_id': str(perf.get('staffId')),
            'new_clients': to_int(perf.get('newClientCount')),
            'retention_rate': _rate(perf.get('clientRetentionRate')),
            'retail_sales': to_decimal(perf.get('retailSales')),
            'extension_clients': to_int(perf.get('extensionClientCount')),
            'total_revenue': to_decimal(perf.get('totalRevenue') or perf.get('serviceRevenue')),
            'service_count': to_int(perf.get('appointmentCount') or perf.get('serviceCount')),
            'average_ticket': to_decimal(perf.get('averageTicket')),
            'rebooking_rate': _rate(perf.get('rebookingRate')),
        }
        if upsert_row(PerformanceMetric, {'user_id': user_id, 'week_start': week_start}, values):
            synced += 1

    return {
        'total': len(rows),
        'synced': synced,
        'skipped_unmapped': skipped,
        'week_start': week_start.isoformat(),
        'week_end': week_end.isoformat(),
    }
