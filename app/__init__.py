"""
Flask application factory.

This module implements the application factory pattern for creating
Flask application instances with different configurations.
"""

from flask import Flask
import os
from datetime import datetime

from .extensions import db, migrate, limiter
from .config import get_config


def create_app(config_name=None):
    """
    Application factory function.

    Args:
        config_name: Configuration name (development, testing, production)
                    If None, determined from environment

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Trust the reverse proxy headers (X-Forwarded-For, X-Forwarded-Proto)
    from werkzeug.middleware.proxy_fix import ProxyFix
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    config_class = get_config(config_name)
    app.config.from_object(config_class)

    app.config['VERSION'] = datetime.now().strftime('%Y%m%d%H%M%S')

    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    os.makedirs(os.path.join(basedir, "instance"), exist_ok=True)

    # Resolve the relative SQLite default against the project directory
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///instance/'):
        app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{os.path.join(basedir, "instance", "phorest_sync.db")}'

    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    from app.integrations.phorest import phorest_gateway
    phorest_gateway.init_app(app)

    from app.error_handlers import setup_logging, register_error_handlers
    setup_logging(app)
    register_error_handlers(app)

    from app.models import init_models, model_registry
    models = init_models(db)

    model_registry.init_app(app)
    model_registry.register(models)

    register_blueprints(app)

    return app


def register_blueprints(app):
    """Register all Flask blueprints."""

    from app.routes import health_bp, phorest_sync_bp

    app.register_blueprint(phorest_sync_bp)
    app.register_blueprint(health_bp)

    # Probes are polled frequently
    limiter.exempt(health_bp)


def init_db(app):
    """Initialize the database."""
    with app.app_context():
        db.create_all()
