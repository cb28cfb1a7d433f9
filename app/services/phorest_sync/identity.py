"""
Identity lookups used by the synchronizers

StaffIdentityMap resolves Phorest staff ids to internal user ids.
LocationMatcher resolves Phorest branches to internal location ids.
Both are loaded once per sub-synchronizer run and are read-only.
"""
import logging
from typing import Dict, Iterable, Optional, Tuple

from app.models import get_models

logger = logging.getLogger(__name__)


class StaffIdentityMap:
    """
    Read-only view of the active staff mappings

    An unmapped staff id resolves to None; callers keep the raw Phorest id
    alongside so the row can be mapped later.
    """

    def __init__(self, mapping: Optional[Dict[str, str]] = None):
        self._mapping = dict(mapping or {})

    @classmethod
    def load(cls) -> 'StaffIdentityMap':
        """Load active mappings from the phorest_staff_mapping table"""
        StaffMapping = get_models()['StaffMapping']
        rows = StaffMapping.query.filter_by(is_active=True).all()
        logger.debug(f"Loaded {len(rows)} active staff mappings")
        return cls({row.phorest_staff_id: row.user_id for row in rows})

    def resolve(self, phorest_staff_id) -> Optional[str]:
        if not phorest_staff_id:
            return None
        return self._mapping.get(str(phorest_staff_id))

    def is_mapped(self, phorest_staff_id) -> bool:
        return self.resolve(phorest_staff_id) is not None

    def __len__(self):
        return len(self._mapping)


class LocationMatcher:
    """
    Best-effort Phorest branch to internal location resolution

    An explicit ``locations.phorest_branch_id`` link wins; otherwise the
    branch name is compared case-insensitively with the location name.
    Unmatched branches resolve to None.
    """

    def __init__(self, locations: Iterable[Tuple[str, str, Optional[str]]] = ()):
        self._by_branch_id: Dict[str, str] = {}
        self._by_name: Dict[str, str] = {}
        for location_id, name, branch_id in locations:
            if branch_id:
                self._by_branch_id[str(branch_id)] = location_id
            if name:
                self._by_name.setdefault(self._normalize(name), location_id)

    @staticmethod
    def _normalize(name: str) -> str:
        return ' '.join(name.split()).lower()

    @classmethod
    def load(cls) -> 'LocationMatcher':
        """Load locations from the locations table"""
        Location = get_models()['Location']
        rows = Location.query.all()
        return cls((row.id, row.name, row.phorest_branch_id) for row in rows)

    def resolve(self, branch_id=None, branch_name: Optional[str] = None) -> Optional[str]:
        if branch_id and str(branch_id) in self._by_branch_id:
            return self._by_branch_id[str(branch_id)]
        if branch_name:
            return self._by_name.get(self._normalize(branch_name))
        return None
