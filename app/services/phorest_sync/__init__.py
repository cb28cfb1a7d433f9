"""
Phorest synchronization services

One module per entity type plus the orchestrator that runs them.
"""
from .appointments import map_status, sync_appointments
from .branches import Branch, BranchResult, fetch_per_branch, load_branches
from .clients import ClientCandidate, ClientMerge, sync_clients
from .identity import LocationMatcher, StaffIdentityMap
from .orchestrator import (
    ENTITY_TYPES,
    PhorestSyncOrchestrator,
    SyncRun,
    SyncWindow,
    resolve_sync_window,
    run_sync,
)
from .reports import sync_performance_reports
from .sales import DailySalesBucket, SalesAggregator, classify_item, sync_sales
from .staff import ExternalStaffRecord, sync_staff

__all__ = [
    'map_status',
    'sync_appointments',
    'Branch',
    'BranchResult',
    'fetch_per_branch',
    'load_branches',
    'ClientCandidate',
    'ClientMerge',
    'sync_clients',
    'LocationMatcher',
    'StaffIdentityMap',
    'ENTITY_TYPES',
    'PhorestSyncOrchestrator',
    'SyncRun',
    'SyncWindow',
    'resolve_sync_window',
    'run_sync',
    'sync_performance_reports',
    'DailySalesBucket',
    'SalesAggregator',
    'classify_item',
    'sync_sales',
    'ExternalStaffRecord',
    'sync_staff',
]
