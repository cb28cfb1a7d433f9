"""
Tests for appointment synchronization and status normalization.
"""
import pytest
from datetime import date
from decimal import Decimal

from app.services.phorest_sync import map_status, sync_appointments
from app.services.phorest_sync.appointments import STATUS_MAP


@pytest.mark.unit
class TestMapStatus:

    @pytest.mark.parametrize('raw, expected', [
        ('CONFIRMED', 'confirmed'),
        ('checked_in', 'checked_in'),
        ('STARTED', 'in_progress'),
        ('In_Progress', 'in_progress'),
        ('COMPLETED', 'completed'),
        ('CANCELLED', 'cancelled'),
        ('NO_SHOW', 'no_show'),
        ('PAYMENT_PENDING', 'payment_pending'),
        (None, 'unknown'),
        ('', 'unknown'),
        ('   ', 'unknown'),
    ])
    def test_mapping(self, raw, expected):
        assert map_status(raw) == expected

    def test_every_known_status_is_lowercase(self):
        for raw in STATUS_MAP:
            assert map_status(raw) == map_status(raw).lower()


def _appointment(phorest_id, staff_id='ph-1', **extra):
    apt = {
        'appointmentId': phorest_id,
        'staffId': staff_id,
        'clientId': 'cl-1',
        'client': {'firstName': 'Dee', 'lastName': 'Park', 'mobile': '555-0101'},
        'appointmentDate': '2024-01-05',
        'startTime': '2024-01-05T14:30:00',
        'endTime': '2024-01-05T15:45:00',
        'services': [{'name': 'Balayage', 'category': 'Color'}],
        'status': 'CONFIRMED',
        'totalPrice': 180,
    }
    apt.update(extra)
    return apt


class TestSyncAppointments:

    def test_upserts_mapped_appointment(self, db, models, gateway, identity):
        gateway.appointments = [_appointment('apt-1')]

        result = sync_appointments(gateway, identity, date(2024, 1, 5), date(2024, 1, 12))

        assert result['total'] == 1
        assert result['synced'] == 1
        row = models['Appointment'].query.filter_by(phorest_id='apt-1').one()
        assert row.stylist_user_id == 'user-1'
        assert row.client_name == 'Dee Park'
        assert row.appointment_date == date(2024, 1, 5)
        assert (row.start_time, row.end_time) == ('14:30', '15:45')
        assert row.service_name == 'Balayage'
        assert row.status == 'confirmed'
        assert row.total_price == Decimal('180.00')

    def test_unmapped_stylist_keeps_raw_staff_id(self, db, models, gateway, identity):
        gateway.appointments = [_appointment('apt-2', staff_id='ph-77')]

        sync_appointments(gateway, identity, date(2024, 1, 5), date(2024, 1, 12))

        row = models['Appointment'].query.filter_by(phorest_id='apt-2').one()
        assert row.stylist_user_id is None
        assert row.phorest_staff_id == 'ph-77'

    def test_missing_times_use_defaults(self, db, models, gateway, identity):
        gateway.appointments = [_appointment('apt-3', startTime=None, endTime=None, services=[])]

        sync_appointments(gateway, identity, date(2024, 1, 5), date(2024, 1, 12))

        row = models['Appointment'].query.filter_by(phorest_id='apt-3').one()
        assert (row.start_time, row.end_time) == ('09:00', '10:00')
        assert row.service_name == 'Unknown Service'

    def test_rerun_updates_instead_of_duplicating(self, db, models, gateway, identity):
        gateway.appointments = [_appointment('apt-1')]
        sync_appointments(gateway, identity, date(2024, 1, 5), date(2024, 1, 12))

        gateway.appointments = [_appointment('apt-1', status='CANCELLED')]
        sync_appointments(gateway, identity, date(2024, 1, 5), date(2024, 1, 12))

        rows = models['Appointment'].query.all()
        assert len(rows) == 1
        assert rows[0].status == 'cancelled'

    def test_appointments_without_id_are_skipped(self, db, models, gateway, identity):
        gateway.appointments = [_appointment(None), _appointment('apt-4')]

        result = sync_appointments(gateway, identity, date(2024, 1, 5), date(2024, 1, 12))

        assert result == {'total': 2, 'synced': 1, 'date_from': '2024-01-05', 'date_to': '2024-01-12'}

    def test_location_resolved_from_branch(self, db, models, gateway, identity, locations):
        gateway.appointments = [_appointment('apt-5', branchId='br-2')]

        sync_appointments(gateway, identity, date(2024, 1, 5), date(2024, 1, 12), locations=locations)

        assert models['Appointment'].query.one().location_id == 'loc-val'
