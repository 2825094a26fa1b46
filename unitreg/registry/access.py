"""Access control table — explicit per-unit accessor grants.

Grants are advisory. The creator of a unit receives one automatically;
mutating operations authorize by ownership and never consult this table.
"""

from __future__ import annotations

from unitreg.registry.errors import GrantNotFound
from unitreg.registry.models import AccessGrant


class AccessControlTable:
    """Keyed table of (unit id, accessor) -> allowed."""

    def __init__(self) -> None:
        self._grants: dict[tuple[int, str], AccessGrant] = {}

    def __len__(self) -> int:
        return len(self._grants)

    def grant(self, unit_id: int, accessor: str, allowed: bool = True) -> AccessGrant:
        entry = AccessGrant(unit_id=unit_id, accessor=accessor, allowed=allowed)
        self._grants[(unit_id, accessor)] = entry
        return entry

    def check_access(self, unit_id: int, accessor: str) -> bool:
        """Return the stored flag, or raise GrantNotFound if there is no row."""
        entry = self._grants.get((unit_id, accessor))
        if entry is None:
            raise GrantNotFound(f"no access grant for {accessor!r} on unit {unit_id}")
        return entry.allowed
