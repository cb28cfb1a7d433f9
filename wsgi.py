"""
WSGI Entry Point for Production Deployment
Phorest Sync Service

This file serves as the entry point for WSGI servers (Gunicorn, uWSGI, etc.)
in production environments.

Usage with Gunicorn:
    gunicorn --config gunicorn_config.py wsgi:app
"""
import os

# Set production environment if not already set
if 'FLASK_ENV' not in os.environ:
    os.environ['FLASK_ENV'] = 'production'

from app import create_app, init_db
from app.config import get_config

# Fail fast on missing production settings
get_config(validate=True)

app = create_app()

# Tables are normally managed with `flask db upgrade`
try:
    init_db(app)
except Exception as e:
    app.logger.warning(f"Database initialization skipped or failed: {e}")

application = app

if __name__ == "__main__":
    app.run(debug=True, host='0.0.0.0', port=5000)
