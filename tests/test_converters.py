"""
Unit tests for payload helpers: envelope extraction, value converters and
sync request validation.
"""
import pytest
from datetime import date, datetime
from decimal import Decimal

from app.error_handlers.exceptions import ValidationException
from app.integrations.phorest.envelopes import extract_list
from app.utils.converters import parse_date, parse_datetime, time_of_day, to_decimal, to_int
from app.utils.validators import validate_sync_request


@pytest.mark.unit
class TestExtractList:

    def test_embedded_key_wins_over_bare_key(self):
        payload = {'_embedded': {'staffs': [{'id': 1}]}, 'staffs': [{'id': 2}]}
        assert extract_list(payload, 'staffs') == [{'id': 1}]

    def test_keys_tried_in_order(self):
        payload = {'_embedded': {'staff': [{'id': 'b'}]}}
        assert extract_list(payload, 'staffs', 'staff') == [{'id': 'b'}]

    def test_bare_key(self):
        assert extract_list({'purchases': [1, 2]}, 'purchases') == [1, 2]

    def test_bare_list(self):
        assert extract_list([{'id': 1}], 'branches') == [{'id': 1}]

    @pytest.mark.parametrize('payload', [None, {}, 'oops', 42, {'_embedded': None}, {'branches': 'x'}])
    def test_anything_else_is_empty(self, payload):
        assert extract_list(payload, 'branches') == []


@pytest.mark.unit
class TestConverters:

    def test_to_decimal_rounds_to_cents(self):
        assert to_decimal('40') == Decimal('40.00')
        assert to_decimal(19.999) == Decimal('20.00')

    def test_to_decimal_defaults(self):
        assert to_decimal(None) == Decimal('0.00')
        assert to_decimal('n/a') == Decimal('0.00')
        assert to_decimal(True) == Decimal('0.00')
        assert to_decimal('', default=None) is None

    def test_to_int(self):
        assert to_int('3') == 3
        assert to_int(2.0) == 2
        assert to_int(None) == 0
        assert to_int('x', default=1) == 1

    def test_parse_datetime_normalizes_to_naive_utc(self):
        assert parse_datetime('2024-01-10T14:30:00Z') == datetime(2024, 1, 10, 14, 30)
        assert parse_datetime('2024-01-10T09:30:00-05:00') == datetime(2024, 1, 10, 14, 30)
        assert parse_datetime('2024-01-10') == datetime(2024, 1, 10)
        assert parse_datetime('garbage') is None
        assert parse_datetime(None) is None

    def test_parse_date_keeps_literal_date(self):
        assert parse_date('2024-01-05T23:30:00-05:00') == date(2024, 1, 5)
        assert parse_date('2024-01-05') == date(2024, 1, 5)
        assert parse_date('') is None

    def test_time_of_day(self):
        assert time_of_day('2024-01-05T14:30:00') == '14:30'
        assert time_of_day('2024-01-05 08:05:00') == '08:05'
        assert time_of_day('09:15:00') == '09:15'
        assert time_of_day('2024-01-05', '09:00') == '09:00'
        assert time_of_day(None, '10:00') == '10:00'


@pytest.mark.unit
class TestValidateSyncRequest:

    def test_valid_request(self):
        params = validate_sync_request({
            'sync_type': 'sales', 'date_from': '2024-01-01', 'date_to': '2024-01-07', 'quick': True,
        })
        assert params == {
            'sync_type': 'sales',
            'date_from': date(2024, 1, 1),
            'date_to': date(2024, 1, 7),
            'quick': True,
        }

    def test_defaults(self):
        params = validate_sync_request({'sync_type': 'all'})
        assert params['date_from'] is None
        assert params['date_to'] is None
        assert params['quick'] is False

    @pytest.mark.parametrize('data', [
        None,
        [],
        {},
        {'sync_type': 'payroll'},
        {'sync_type': 'staff', 'date_from': '01/02/2024'},
        {'sync_type': 'staff', 'date_from': '2024-02-10', 'date_to': '2024-02-01'},
        {'sync_type': 'staff', 'quick': 'yes'},
    ])
    def test_invalid_requests(self, data):
        with pytest.raises(ValidationException):
            validate_sync_request(data)
