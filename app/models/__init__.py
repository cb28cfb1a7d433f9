"""
Database models for the Phorest sync service
Centralizes all SQLAlchemy model imports using factory pattern
"""
from .location import create_location_models
from .appointment import create_appointment_model
from .client import create_client_model
from .performance_metric import create_performance_metric_model
from .sales import create_sales_models
from .sync_log import create_sync_log_model


_models = None


def init_models(db):
    """
    Initialize all models with the database instance

    Model classes are bound to the metadata once per process; later calls
    (another app instance in the same worker) reuse them.

    Args:
        db: SQLAlchemy database instance

    Returns:
        dict: Dictionary containing all model classes
    """
    global _models
    if _models is not None:
        return _models

    Location, StaffMapping = create_location_models(db)
    Appointment = create_appointment_model(db)
    Client = create_client_model(db)
    PerformanceMetric = create_performance_metric_model(db)
    SalesTransaction, DailySalesSummary = create_sales_models(db)
    SyncLog = create_sync_log_model(db)

    _models = {
        'Location': Location,
        'StaffMapping': StaffMapping,
        'Appointment': Appointment,
        'Client': Client,
        'PerformanceMetric': PerformanceMetric,
        'SalesTransaction': SalesTransaction,
        'DailySalesSummary': DailySalesSummary,
        'SyncLog': SyncLog,
    }
    return _models


__all__ = [
    'init_models',
    'create_location_models',
    'create_appointment_model',
    'create_client_model',
    'create_performance_metric_model',
    'create_sales_models',
    'create_sync_log_model',
    # Model registry exports
    'model_registry',
    'get_models',
    'get_db'
]

# Import registry for convenience
from .registry import model_registry, get_models, get_db
