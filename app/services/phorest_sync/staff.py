"""
Staff reconciliation

Pulls staff for every branch, deduplicates people who work at several
branches and reports those with no internal identity mapping so an admin
can map them. Nothing is persisted.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .branches import Branch, fetch_per_branch, load_branches

logger = logging.getLogger(__name__)


@dataclass
class ExternalStaffRecord:
    """Staff member as seen in one branch's staff list"""
    staff_id: str
    first_name: str = ''
    last_name: str = ''
    email: Optional[str] = None
    branch_id: Optional[str] = None
    branch_name: Optional[str] = None

    @classmethod
    def from_payload(cls, raw: Dict[str, Any], branch: Branch) -> Optional['ExternalStaffRecord']:
        staff_id = raw.get('staffId') or raw.get('id')
        if not staff_id:
            return None
        return cls(
            staff_id=str(staff_id),
            first_name=raw.get('firstName') or '',
            last_name=raw.get('lastName') or '',
            email=raw.get('email'),
            branch_id=branch.branch_id,
            branch_name=branch.name,
        )

    @property
    def full_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email or self.staff_id

    def to_unmapped_dict(self) -> Dict[str, Any]:
        return {
            'phorest_id': self.staff_id,
            'name': self.full_name,
            'email': self.email,
            'branch_id': self.branch_id,
            'branch_name': self.branch_name,
        }


def sync_staff(gateway, identity, max_workers: int = 1) -> Dict[str, Any]:
    """
    Reconcile Phorest staff against the identity mappings.

    A failure listing branches is fatal; a failure for one branch's staff
    list only drops that branch.

    Returns:
        dict: total_staff, mapped, unmapped, unmapped_staff, failed_branches
    """
    branches = load_branches(gateway)
    logger.info(f"Reconciling staff across {len(branches)} branches")

    results = fetch_per_branch(
        branches,
        lambda branch: gateway.list_branch_staff(branch.branch_id),
        max_workers=max_workers,
        operation='staff'
    )

    unique_staff: Dict[str, ExternalStaffRecord] = {}
    failed_branches = []
    for result in results:
        if not result.ok:
            failed_branches.append(result.failure_summary())
            continue
        for raw in result.records:
            record = ExternalStaffRecord.from_payload(raw, result.branch) if isinstance(raw, dict) else None
            if record:
                # Last branch seen wins
                unique_staff[record.staff_id] = record

    unmapped = [record for record in unique_staff.values() if not identity.is_mapped(record.staff_id)]
    logger.info(f"Found {len(unique_staff)} unique staff, {len(unmapped)} unmapped")

    return {
        'total_staff': len(unique_staff),
        'mapped': len(unique_staff) - len(unmapped),
        'unmapped': len(unmapped),
        'unmapped_staff': [record.to_unmapped_dict() for record in unmapped],
        'failed_branches': failed_branches,
    }
