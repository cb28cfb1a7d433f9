"""
Phorest sync orchestration

Resolves the date windows for a run, then executes each requested entity
synchronizer in its own failure boundary and appends one SyncLog row per
entity with its terminal state.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app.error_handlers.logging import sync_logger
from app.models import get_db, get_models
from .appointments import sync_appointments
from .clients import sync_clients
from .identity import LocationMatcher, StaffIdentityMap
from .reports import sync_performance_reports
from .sales import sync_sales
from .staff import sync_staff

logger = logging.getLogger(__name__)

ENTITY_TYPES = ('staff', 'appointments', 'clients', 'reports', 'sales')


@dataclass(frozen=True)
class SyncWindow:
    """Date ranges used by one sync run"""
    appointments_from: date
    appointments_to: date
    sales_from: date
    sales_to: date
    week_start: date

    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=6)


def resolve_sync_window(
    today: date,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    quick: bool = False,
    appointment_days: int = 7,
    sales_lookback_days: int = 30,
) -> SyncWindow:
    """
    Work out the appointment, sales and report windows for a run.

    Quick runs read today's sales only; full runs look back
    ``sales_lookback_days``. Appointments always look ``appointment_days``
    ahead. Explicit dates override the defaults for both windows. Reports
    always cover the ISO week containing ``today``.

    Examples:
        >>> w = resolve_sync_window(date(2024, 1, 10), quick=True)
        >>> (w.sales_from, w.sales_to, w.week_start)
        (datetime.date(2024, 1, 10), datetime.date(2024, 1, 10), datetime.date(2024, 1, 8))
    """
    appointments_from = date_from or today
    appointments_to = date_to or appointments_from + timedelta(days=appointment_days)

    sales_from = date_from or (today if quick else today - timedelta(days=sales_lookback_days))
    sales_to = date_to or today

    # An explicit end before the default start collapses to a single day
    appointments_from = min(appointments_from, appointments_to)
    sales_from = min(sales_from, sales_to)

    return SyncWindow(
        appointments_from=appointments_from,
        appointments_to=appointments_to,
        sales_from=sales_from,
        sales_to=sales_to,
        week_start=today - timedelta(days=today.weekday()),
    )


class SyncRun:
    """
    Lifecycle of one entity synchronizer invocation

    pending -> running -> success | failed. Only the terminal state is
    persisted.
    """

    PENDING = 'pending'
    RUNNING = 'running'
    SUCCESS = 'success'
    FAILED = 'failed'

    def __init__(self, sync_type: str, metadata: Optional[Dict[str, Any]] = None):
        self.sync_type = sync_type
        self.metadata = dict(metadata or {})
        self.status = self.PENDING
        self.records_synced = 0
        self.started_at: Optional[datetime] = None
        self.completed_at: Optional[datetime] = None
        self.error_message: Optional[str] = None

    def start(self):
        if self.status != self.PENDING:
            raise RuntimeError(f"Cannot start a {self.status} sync run")
        self.status = self.RUNNING
        self.started_at = datetime.utcnow()

    def succeed(self, records_synced: int):
        self._finish(self.SUCCESS)
        self.records_synced = records_synced

    def fail(self, error: Exception):
        self._finish(self.FAILED)
        self.error_message = str(error)

    def _finish(self, status: str):
        if self.status != self.RUNNING:
            raise RuntimeError(f"Cannot finish a {self.status} sync run")
        self.status = status
        self.completed_at = datetime.utcnow()

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.SUCCESS, self.FAILED)

    def to_log_values(self) -> Dict[str, Any]:
        return {
            'sync_type': self.sync_type,
            'status': self.status,
            'records_synced': self.records_synced,
            'started_at': self.started_at,
            'completed_at': self.completed_at,
            'error_message': self.error_message,
            'sync_metadata': self.metadata,
        }


class PhorestSyncOrchestrator:
    """Runs the requested entity synchronizers against one gateway"""

    # Result key holding the record count written to the sync log
    RECORD_COUNT_KEYS = {
        'staff': 'mapped',
        'appointments': 'synced',
        'clients': 'synced',
        'reports': 'synced',
        'sales': 'synced',
    }

    def __init__(self, gateway, config: Optional[Dict[str, Any]] = None, today: Optional[date] = None):
        self.gateway = gateway
        self.config = config if config is not None else current_app.config
        self.today = today

    def _setting(self, key: str, default: int) -> int:
        return int(self.config.get(key, default))

    def run(
        self,
        sync_type: str = 'all',
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        quick: bool = False,
    ) -> Dict[str, Any]:
        """
        Execute one sync request.

        Args:
            sync_type: One entity type or 'all'
            date_from: Explicit window start
            date_to: Explicit window end
            quick: Narrow the default sales window to today

        Returns:
            dict: entity type -> synchronizer result, or {'error': message}
        """
        if sync_type != 'all' and sync_type not in ENTITY_TYPES:
            raise ValueError(f"Unknown sync_type: {sync_type}")

        today = self.today or date.today()
        window = resolve_sync_window(
            today,
            date_from=date_from,
            date_to=date_to,
            quick=quick,
            appointment_days=self._setting('APPOINTMENT_WINDOW_DAYS', 7),
            sales_lookback_days=self._setting('SALES_LOOKBACK_DAYS', 30),
        )
        entity_types = ENTITY_TYPES if sync_type == 'all' else (sync_type,)

        sync_logger.sync_started(f'phorest {sync_type}', f"quick={quick}")
        self.gateway.reset_circuits()

        results = {}
        for entity_type in entity_types:
            results[entity_type] = self._run_entity(entity_type, window, quick)

        sync_logger.sync_completed(
            f'phorest {sync_type}',
            {name: 'failed' if 'error' in result else 'ok' for name, result in results.items()}
        )
        return results

    def _entity_plan(self, entity_type: str, window: SyncWindow, quick: bool):
        """Synchronizer callable and log metadata for one entity type"""
        max_workers = self._setting('PHOREST_SYNC_MAX_WORKERS', 1)

        if entity_type == 'staff':
            return (
                lambda: sync_staff(self.gateway, StaffIdentityMap.load(), max_workers=max_workers),
                {'quick': quick},
            )
        if entity_type == 'appointments':
            return (
                lambda: sync_appointments(self.gateway, StaffIdentityMap.load(), window.appointments_from,
                                          window.appointments_to, locations=LocationMatcher.load()),
                {'quick': quick, 'date_from': window.appointments_from.isoformat(),
                 'date_to': window.appointments_to.isoformat()},
            )
        if entity_type == 'clients':
            return (
                lambda: sync_clients(self.gateway, StaffIdentityMap.load(), LocationMatcher.load(),
                                     page_size=self._setting('PHOREST_CLIENT_PAGE_SIZE', 500),
                                     max_workers=max_workers),
                {'quick': quick},
            )
        if entity_type == 'reports':
            return (
                lambda: sync_performance_reports(self.gateway, StaffIdentityMap.load(), window.week_start),
                {'quick': quick, 'week_start': window.week_start.isoformat(),
                 'week_end': window.week_end.isoformat()},
            )
        return (
            lambda: sync_sales(self.gateway, StaffIdentityMap.load(), LocationMatcher.load(),
                               window.sales_from, window.sales_to, max_workers=max_workers),
            {'quick': quick, 'date_from': window.sales_from.isoformat(),
             'date_to': window.sales_to.isoformat()},
        )

    def _run_entity(self, entity_type: str, window: SyncWindow, quick: bool) -> Dict[str, Any]:
        sync, metadata = self._entity_plan(entity_type, window, quick)
        run = SyncRun(entity_type, metadata)
        run.start()

        try:
            result = sync()
            run.succeed(int(result.get(self.RECORD_COUNT_KEYS[entity_type], 0)))
            sync_logger.sync_completed(entity_type, {'records_synced': run.records_synced})
        except Exception as e:
            get_db().session.rollback()
            error_id = sync_logger.sync_failed(entity_type, e, context=metadata)
            run.fail(e)
            run.metadata['error_id'] = error_id
            result = {'error': str(e)}

        self._write_log(run)
        return result

    def _write_log(self, run: SyncRun):
        """Append the terminal state of a run to the sync log"""
        db = get_db()
        SyncLog = get_models()['SyncLog']
        try:
            db.session.add(SyncLog(**run.to_log_values()))
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to write sync log for {run.sync_type}: {str(e)}")


def run_sync(sync_type: str = 'all', date_from: Optional[date] = None, date_to: Optional[date] = None,
             quick: bool = False) -> Dict[str, Any]:
    """Run the orchestrator against the application's gateway (needs an app context)"""
    from app.integrations.phorest import phorest_gateway

    orchestrator = PhorestSyncOrchestrator(phorest_gateway, current_app.config)
    return orchestrator.run(sync_type, date_from=date_from, date_to=date_to, quick=quick)
