"""
Celery worker configuration
Run this to start the Celery worker for background Phorest syncs:

    celery -A celery_worker.celery_app worker --loglevel=info
"""
from app.services.sync_service import celery_app, FlaskTask
from app import create_app

app = create_app()
FlaskTask._app = app

celery_app.conf.update(
    broker_url=app.config['CELERY_BROKER_URL'],
    result_backend=app.config['CELERY_RESULT_BACKEND'],
)

if __name__ == '__main__':
    celery_app.start()
