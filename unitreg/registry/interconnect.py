"""Interconnection table — directed, insert-only relations between units."""

from __future__ import annotations

from unitreg.registry.errors import BoundaryBreach, DuplicateConflict, InvalidEncoding
from unitreg.registry.models import Interconnection

INTENSITY_MIN = 1
INTENSITY_MAX = 99


class InterconnectionTable:
    """Map of (primary id, secondary id) -> Interconnection.

    (A, B) and (B, A) are distinct keys. Endpoint existence is checked by
    the caller, which owns the unit store.
    """

    def __init__(self) -> None:
        self._links: dict[tuple[int, int], Interconnection] = {}

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, key: object) -> bool:
        return key in self._links

    def link(
        self, primary_id: int, secondary_id: int, intensity: int, kind: str
    ) -> Interconnection:
        if (
            isinstance(intensity, bool)
            or not isinstance(intensity, int)
            or not INTENSITY_MIN <= intensity <= INTENSITY_MAX
        ):
            raise BoundaryBreach(
                f"intensity must be between {INTENSITY_MIN} and {INTENSITY_MAX}"
            )
        if not isinstance(kind, str) or not kind:
            raise InvalidEncoding("interconnection kind must not be empty")

        key = (primary_id, secondary_id)
        if key in self._links:
            raise DuplicateConflict(
                f"units {primary_id} -> {secondary_id} are already linked"
            )

        entry = Interconnection(
            primary_id=primary_id,
            secondary_id=secondary_id,
            intensity=intensity,
            kind=kind,
        )
        self._links[key] = entry
        return entry
