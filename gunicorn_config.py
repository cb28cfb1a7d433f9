"""
Gunicorn configuration for the Phorest sync service

Usage:
    gunicorn --config gunicorn_config.py wsgi:app
"""
import os

bind = os.getenv('GUNICORN_BIND', '0.0.0.0:8000')
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
threads = int(os.getenv('GUNICORN_THREADS', '4'))
worker_class = 'gthread'
# A synchronous full sync can walk every branch; keep the worker alive for it
timeout = int(os.getenv('GUNICORN_TIMEOUT', '900'))
graceful_timeout = int(os.getenv('GUNICORN_GRACEFUL_TIMEOUT', '30'))
keepalive = int(os.getenv('GUNICORN_KEEPALIVE', '5'))
max_requests = int(os.getenv('GUNICORN_MAX_REQUESTS', '2000'))
max_requests_jitter = int(os.getenv('GUNICORN_MAX_REQUESTS_JITTER', '200'))

accesslog = os.getenv('GUNICORN_ACCESS_LOG', '-')
errorlog = os.getenv('GUNICORN_ERROR_LOG', '-')
loglevel = os.getenv('GUNICORN_LOG_LEVEL', 'info')
access_log_format = '%(h)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

proc_name = 'phorest_sync'

raw_env = [
    f"FLASK_ENV={os.getenv('FLASK_ENV', 'production')}",
]


def on_starting(server):
    """Called just before the master process is initialized."""
    server.log.info("Starting Phorest sync service")


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Phorest sync service is ready. Listening on: %s", bind)


def worker_abort(worker):
    """Called when a worker receives the SIGABRT signal, usually a timeout."""
    worker.log.info("Worker received SIGABRT")
