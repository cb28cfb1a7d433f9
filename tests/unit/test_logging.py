"""
Tests for logging setup.
"""
import logging

import pytest

from app.error_handlers.logging import SERVICE_LOGGERS, setup_logging


def _installed(logger):
    return [h for h in logger.handlers if getattr(h, '_phorest_sync', False)]


@pytest.mark.unit
def test_repeated_setup_does_not_stack_handlers(app):
    setup_logging(app)
    setup_logging(app)

    assert len(_installed(app.logger)) == 2
    for name in SERVICE_LOGGERS:
        logger = logging.getLogger(name)
        assert len(_installed(logger)) == 2
        assert logger.propagate is False


@pytest.mark.unit
def test_service_loggers_share_app_handlers(app):
    setup_logging(app)

    app_handlers = set(_installed(app.logger))
    for name in SERVICE_LOGGERS:
        assert set(_installed(logging.getLogger(name))) == app_handlers
