"""
Services package for sync logic and background tasks
"""
from .phorest_sync import PhorestSyncOrchestrator, run_sync

__all__ = [
    'PhorestSyncOrchestrator',
    'run_sync',
]
