"""
Pytest configuration and fixtures for the Phorest sync service tests.

This module provides shared fixtures for:
- Flask application with test configuration
- Database setup and teardown
- Model factories for creating test data
- An in-memory fake of the Phorest gateway
"""
import pytest

from app import create_app
from app.extensions import db as _db
from app.services.phorest_sync import LocationMatcher, StaffIdentityMap


@pytest.fixture(scope='session')
def app():
    """
    Create application for the tests.

    Uses TestingConfig with in-memory SQLite database.
    Scope is 'session' to reuse the same app across all tests.
    """
    app = create_app('testing')
    app.config.update({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RATELIMIT_ENABLED': False,
    })

    return app


@pytest.fixture(scope='function')
def db(app):
    """
    Create database for the tests.

    Creates all tables before each test function and drops them after.
    This ensures test isolation.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def client(app, db):
    """Test client bound to a fresh database"""
    with app.test_client() as client:
        yield client


@pytest.fixture(scope='function')
def models(app, db):
    """All registered models"""
    from app.models import get_models
    return get_models()


# =============================================================================
# Model Factories
# =============================================================================

@pytest.fixture
def staff_mapping_factory(models, db):
    """
    Factory for creating StaffMapping rows.

    Usage:
        staff_mapping_factory('ph-1', 'user-1')
        staff_mapping_factory('ph-2', 'user-2', is_active=False)
    """
    def _create_mapping(phorest_staff_id, user_id, **kwargs):
        StaffMapping = models['StaffMapping']
        defaults = {
            'phorest_staff_id': phorest_staff_id,
            'user_id': user_id,
            'phorest_staff_name': f'Stylist {user_id}',
            'is_active': True,
        }
        defaults.update(kwargs)
        mapping = StaffMapping(**defaults)
        db.session.add(mapping)
        db.session.commit()
        return mapping

    return _create_mapping


@pytest.fixture
def location_factory(models, db):
    """
    Factory for creating Location rows.

    Usage:
        location_factory('loc-north', 'North Mesa')
        location_factory('loc-val', 'Val Vista', phorest_branch_id='br-2')
    """
    def _create_location(location_id, name, **kwargs):
        Location = models['Location']
        location = Location(id=location_id, name=name, **kwargs)
        db.session.add(location)
        db.session.commit()
        return location

    return _create_location


@pytest.fixture
def identity():
    """Identity map with two mapped stylists"""
    return StaffIdentityMap({'ph-1': 'user-1', 'ph-2': 'user-2'})


@pytest.fixture
def locations():
    """Matcher for two locations, one linked explicitly by branch id"""
    return LocationMatcher([
        ('loc-north', 'North Mesa', None),
        ('loc-val', 'Val Vista Lakes', 'br-2'),
    ])


# =============================================================================
# Fake Phorest gateway
# =============================================================================

class FakeGateway:
    """
    In-memory stand-in for PhorestGateway

    Each endpoint returns the canned data for its scope. Register an
    exception in ``failures`` under the endpoint name, or under
    (endpoint name, branch id), to make that call raise.
    """

    def __init__(self, branches=None):
        self.branches = branches if branches is not None else [
            {'branchId': 'br-1', 'name': 'North Mesa'},
            {'branchId': 'br-2', 'name': 'Val Vista'},
        ]
        self.staff = {}
        self.appointments = []
        self.clients = {}
        self.global_clients = []
        self.performance = []
        self.purchases = {}
        self.failures = {}
        self.calls = []
        self.circuit_resets = 0

    def _call(self, name, branch_id=None):
        self.calls.append((name, branch_id))
        error = self.failures.get((name, branch_id)) or self.failures.get(name)
        if error:
            raise error

    def reset_circuits(self):
        self.circuit_resets += 1

    def list_branches(self):
        self._call('list_branches')
        return list(self.branches)

    def list_branch_staff(self, branch_id):
        self._call('list_branch_staff', branch_id)
        return list(self.staff.get(branch_id, []))

    def list_appointments(self, date_from, date_to):
        self._call('list_appointments')
        self.appointment_window = (date_from, date_to)
        return list(self.appointments)

    def list_branch_clients(self, branch_id, size=500):
        self._call('list_branch_clients', branch_id)
        return list(self.clients.get(branch_id, []))[:size]

    def list_clients(self, size=500):
        self._call('list_clients')
        return list(self.global_clients)[:size]

    def staff_performance_report(self, start_date, end_date):
        self._call('staff_performance_report')
        self.report_window = (start_date, end_date)
        return list(self.performance)

    def list_branch_purchases(self, branch_id, date_from, date_to):
        self._call('list_branch_purchases', branch_id)
        self.sales_window = (date_from, date_to)
        return list(self.purchases.get(branch_id, []))


@pytest.fixture
def gateway():
    """Fresh fake gateway with two branches"""
    return FakeGateway()


@pytest.fixture
def gateway_factory():
    """The FakeGateway class, for tests needing custom branches"""
    return FakeGateway


def make_purchase(purchase_id, staff_id='ph-1', when='2024-01-05T10:30:00', items=None, **extra):
    """Build a Phorest purchase payload"""
    purchase = {
        'purchaseId': purchase_id,
        'staffId': staff_id,
        'purchaseDate': when,
        'items': items if items is not None else [],
    }
    purchase.update(extra)
    return purchase


@pytest.fixture
def purchase_builder():
    return make_purchase
