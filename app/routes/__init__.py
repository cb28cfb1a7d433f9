"""
Routes package for the Phorest sync service
Centralizes all route blueprints
"""
from .health import health_bp
from .phorest_sync import phorest_sync_bp

__all__ = [
    'health_bp',
    'phorest_sync_bp',
]
