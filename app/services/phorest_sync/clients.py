"""
Client reconciliation with recency merge

Phorest exposes clients per branch, so one person can appear under several
branches. The canonical row is the candidate from whichever branch shows the
most recent last appointment; that branch becomes the client's home
location.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, Optional, Tuple

from app.models import get_models
from app.utils.converters import parse_datetime, to_decimal, to_int
from app.utils.db_helpers import upsert_row
from .branches import fetch_per_branch, load_branches

logger = logging.getLogger(__name__)


@dataclass
class ClientCandidate:
    """One branch's view of a client"""
    raw: Dict[str, Any]
    branch_id: Optional[str] = None
    branch_name: Optional[str] = None
    location_id: Optional[str] = None

    @property
    def last_visit(self) -> Optional[datetime]:
        return parse_datetime(self.raw.get('lastAppointmentDate'))


def client_id_of(raw: Any) -> Optional[str]:
    if not isinstance(raw, dict):
        return None
    client_id = raw.get('clientId') or raw.get('id')
    return str(client_id) if client_id else None


class ClientMerge:
    """
    Accumulator keeping one candidate per client id

    A candidate replaces the stored one only when its last visit is strictly
    more recent. Undated candidates never displace a dated one, so the
    result does not depend on branch processing order except for exact ties,
    where the first candidate seen is kept.
    """

    def __init__(self):
        self._clients: Dict[str, ClientCandidate] = {}

    @staticmethod
    def is_more_recent(candidate: ClientCandidate, existing: ClientCandidate) -> bool:
        candidate_visit = candidate.last_visit
        if candidate_visit is None:
            return False
        existing_visit = existing.last_visit
        if existing_visit is None:
            return True
        return candidate_visit > existing_visit

    def offer(self, client_id: str, candidate: ClientCandidate) -> bool:
        """Store the candidate if it is new or more recent; returns True if kept"""
        existing = self._clients.get(client_id)
        if existing is None or self.is_more_recent(candidate, existing):
            self._clients[client_id] = candidate
            return True
        return False

    def get(self, client_id: str) -> Optional[ClientCandidate]:
        return self._clients.get(client_id)

    def items(self) -> Iterator[Tuple[str, ClientCandidate]]:
        return iter(self._clients.items())

    def __len__(self):
        return len(self._clients)


def build_client_values(candidate: ClientCandidate, identity) -> Dict[str, Any]:
    """Column values for the canonical client row"""
    raw = candidate.raw
    name = f"{raw.get('firstName') or ''} {raw.get('lastName') or ''}".strip()

    return {
        'name': name or 'Unknown',
        'email': raw.get('email'),
        'phone': raw.get('mobile') or raw.get('phone'),
        'visit_count': to_int(raw.get('appointmentCount')),
        'last_visit': candidate.last_visit,
        'first_visit': parse_datetime(raw.get('firstVisit') or raw.get('createdAt')),
        'preferred_stylist_id': identity.resolve(raw.get('preferredStaffId')),
        'total_spend': to_decimal(raw.get('totalSpend')),
        'is_vip': bool(raw.get('isVip') or raw.get('vipStatus') == 'VIP'),
        'notes': raw.get('notes'),
        'location_id': candidate.location_id,
        'phorest_branch_id': candidate.branch_id,
        'branch_name': candidate.branch_name,
    }


def sync_clients(gateway, identity, locations, page_size: int = 500, max_workers: int = 1) -> Dict[str, Any]:
    """
    Merge per-branch client lists and upsert one row per Phorest client id.

    Falls back once to the business-wide client listing when no branch
    yields any client, in which case rows carry no location.

    Returns:
        dict: total fetched, unique, synced, used_fallback, failed_branches
    """
    branches = load_branches(gateway)
    logger.info(f"Syncing clients across {len(branches)} branches")

    results = fetch_per_branch(
        branches,
        lambda branch: gateway.list_branch_clients(branch.branch_id, page_size),
        max_workers=max_workers,
        operation='clients'
    )

    merge = ClientMerge()
    fetched = 0
    failed_branches = []
    for result in results:
        if not result.ok:
            failed_branches.append(result.failure_summary())
            continue

        branch = result.branch
        location_id = locations.resolve(branch.branch_id, branch.name)
        for raw in result.records:
            client_id = client_id_of(raw)
            if not client_id:
                continue
            fetched += 1
            merge.offer(client_id, ClientCandidate(
                raw=raw,
                branch_id=branch.branch_id,
                branch_name=branch.name,
                location_id=location_id,
            ))

    used_fallback = False
    if fetched == 0:
        logger.info("No branch-scoped clients returned, falling back to business-wide listing")
        used_fallback = True
        for raw in gateway.list_clients(page_size):
            client_id = client_id_of(raw)
            if not client_id:
                continue
            fetched += 1
            merge.offer(client_id, ClientCandidate(raw=raw))

    Client = get_models()['Client']
    synced = 0
    for client_id, candidate in merge.items():
        values = build_client_values(candidate, identity)
        if upsert_row(Client, {'phorest_client_id': client_id}, values):
            synced += 1

    logger.info(f"Clients: {fetched} fetched, {len(merge)} unique, {synced} synced")

    return {
        'total': fetched,
        'unique': len(merge),
        'synced': synced,
        'used_fallback': used_fallback,
        'failed_branches': failed_branches,
    }
