"""
Branch enumeration and per-branch fetching

Per-branch requests go through a bounded worker pool. Results always come
back in branch order so downstream merging is deterministic, and a failure
for one branch is captured on its result instead of propagating.
"""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from app.error_handlers.logging import sync_logger


@dataclass(frozen=True)
class Branch:
    """A Phorest branch: iteration key and location attribution source"""
    branch_id: str
    name: str = ''

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> Optional['Branch']:
        branch_id = raw.get('branchId') or raw.get('id')
        if not branch_id:
            return None
        return cls(branch_id=str(branch_id), name=raw.get('name') or '')


@dataclass
class BranchResult:
    """Records fetched for one branch, or the error that prevented it"""
    branch: Branch
    records: List[Any] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def failure_summary(self) -> Dict[str, str]:
        return {
            'branch_id': self.branch.branch_id,
            'branch_name': self.branch.name,
            'error': str(self.error),
        }


def load_branches(gateway) -> List[Branch]:
    """
    Enumerate the business's branches.

    Errors propagate: without a branch list there is nothing to iterate.
    """
    branches = []
    for raw in gateway.list_branches():
        branch = Branch.from_payload(raw) if isinstance(raw, dict) else None
        if branch:
            branches.append(branch)
    return branches


def fetch_per_branch(
    branches: List[Branch],
    fetch: Callable[[Branch], List[Any]],
    max_workers: int = 1,
    operation: str = 'branch fetch'
) -> List[BranchResult]:
    """
    Run ``fetch`` for every branch and collect the outcomes in branch order.

    Args:
        branches: Branches to fetch for
        fetch: Callable returning the records for one branch
        max_workers: Pool size; 1 runs sequentially on the calling thread
        operation: Label used in failure logs

    Returns:
        list: One BranchResult per branch, same order as ``branches``
    """
    def _run(branch: Branch) -> BranchResult:
        try:
            return BranchResult(branch=branch, records=list(fetch(branch) or []))
        except Exception as e:
            sync_logger.sync_warning(
                operation,
                f"branch {branch.branch_id} ({branch.name}) skipped: {str(e)}"
            )
            return BranchResult(branch=branch, error=e)

    if max_workers <= 1 or len(branches) <= 1:
        return [_run(branch) for branch in branches]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(branches))) as executor:
        return list(executor.map(_run, branches))
