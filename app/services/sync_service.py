"""
Background sync service for the Phorest integration
Runs the Phorest sync orchestrator from a Celery worker. Scheduling (cron,
beat) lives outside this service and only enqueues the task.
"""
import logging
from celery import Celery, Task
from decouple import config

logger = logging.getLogger(__name__)

celery_app = Celery(
    'phorest_sync',
    broker=config('CELERY_BROKER_URL', default='redis://localhost:6379/0'),
    backend=config('CELERY_RESULT_BACKEND', default='redis://localhost:6379/0')
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=1800,  # full syncs walk every branch
    task_soft_time_limit=1500,
    broker_connection_retry_on_startup=True,
)


class FlaskTask(Task):
    """Custom Celery task that runs within Flask app context"""
    _app = None

    def __call__(self, *args, **kwargs):
        if self._app is None:
            from app import create_app
            FlaskTask._app = create_app()

        with self._app.app_context():
            return super().__call__(*args, **kwargs)


celery_app.Task = FlaskTask


@celery_app.task(bind=True, name='phorest.run_sync')
def run_phorest_sync(self, sync_type='all', quick=True, date_from=None, date_to=None):
    """
    Background task running one Phorest sync

    Entity failures are already isolated and logged by the orchestrator,
    so the task itself is not retried.

    Args:
        sync_type: staff, appointments, clients, reports, sales or all
        quick: Narrow the default sales window to today
        date_from: Optional window start (YYYY-MM-DD)
        date_to: Optional window end (YYYY-MM-DD)

    Returns:
        dict: success flag and per-entity results
    """
    from app.services.phorest_sync import run_sync
    from app.utils.validators import validate_sync_request

    params = validate_sync_request({
        'sync_type': sync_type,
        'quick': quick,
        'date_from': date_from,
        'date_to': date_to,
    })

    logger.info(f"Starting background Phorest sync: {sync_type} (quick={quick}, task={self.request.id})")
    results = run_sync(
        params['sync_type'],
        date_from=params['date_from'],
        date_to=params['date_to'],
        quick=params['quick'],
    )

    failed = [name for name, result in results.items() if 'error' in result]
    if failed:
        logger.warning(f"Background Phorest sync finished with failures: {', '.join(failed)}")
    else:
        logger.info(f"Background Phorest sync finished: {sync_type}")

    return {'success': not failed, 'results': results}
