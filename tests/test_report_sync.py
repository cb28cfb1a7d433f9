"""
Tests for the weekly staff performance report sync.
"""
from datetime import date
from decimal import Decimal

from app.services.phorest_sync import sync_performance_reports


def _row(staff_id, **extra):
    row = {
        'staffId': staff_id,
        'newClientCount': 3,
        'clientRetentionRate': 0.72,
        'retailSales': 145.5,
        'extensionClientCount': 1,
        'totalRevenue': 2310,
        'appointmentCount': 21,
        'averageTicket': 110,
        'rebookingRate': '0.6',
    }
    row.update(extra)
    return row


class TestSyncPerformanceReports:

    def test_week_window_and_upsert(self, db, models, gateway, identity):
        gateway.performance = [_row('ph-1')]

        result = sync_performance_reports(gateway, identity, date(2024, 1, 8))

        assert gateway.report_window == (date(2024, 1, 8), date(2024, 1, 14))
        assert result['week_start'] == '2024-01-08'
        assert result['week_end'] == '2024-01-14'
        metric = models['PerformanceMetric'].query.one()
        assert metric.user_id == 'user-1'
        assert metric.new_clients == 3
        assert metric.retail_sales == Decimal('145.50')
        assert metric.total_revenue == Decimal('2310.00')
        assert metric.service_count == 21
        assert metric.rebooking_rate == 0.6

    def test_unmapped_staff_are_skipped(self, db, models, gateway, identity):
        gateway.performance = [_row('ph-1'), _row('ph-404')]

        result = sync_performance_reports(gateway, identity, date(2024, 1, 8))

        assert result['total'] == 2
        assert result['synced'] == 1
        assert result['skipped_unmapped'] == 1
        assert models['PerformanceMetric'].query.count() == 1

    def test_rerun_overwrites_week(self, db, models, gateway, identity):
        gateway.performance = [_row('ph-1', newClientCount=3)]
        sync_performance_reports(gateway, identity, date(2024, 1, 8))
        gateway.performance = [_row('ph-1', newClientCount=5)]
        sync_performance_reports(gateway, identity, date(2024, 1, 8))

        metrics = models['PerformanceMetric'].query.all()
        assert len(metrics) == 1
        assert metrics[0].new_clients == 5
