"""Unit store — the primary table of the registry.

Maps a unit id to its full record and owns id allocation. Every write is
preceded by complete validation, so a stored unit always satisfies the
field validators.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from unitreg.registry.errors import InvalidEncoding, NotFound, NotOwner
from unitreg.registry.models import Unit
from unitreg.utils.validator import (
    first_unit_field_error,
    valid_description,
    valid_label_collection,
)

logger = logging.getLogger(__name__)


class UnitStore:
    """In-memory keyed table of units.

    ``total_units`` equals the highest id ever allocated and only grows.
    Ids start at 1 and are never reused.
    """

    def __init__(self) -> None:
        self._units: dict[int, Unit] = {}
        self.total_units = 0

    def __len__(self) -> int:
        return len(self._units)

    def exists(self, unit_id: int) -> bool:
        return unit_id in self._units

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(self, unit_id: int) -> Unit:
        unit = self._units.get(unit_id)
        if unit is None:
            raise NotFound(f"unit {unit_id} does not exist")
        return unit

    def _require_owned(self, unit_id: int, caller: str) -> Unit:
        unit = self._require(unit_id)
        if unit.owner != caller:
            raise NotOwner(f"{caller!r} does not own unit {unit_id}")
        return unit

    @staticmethod
    def _validate_fields(
        signature: str, weight: int, description: str, labels: Sequence[str]
    ) -> None:
        error = first_unit_field_error(signature, weight, description, labels)
        if error is not None:
            raise error

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        signature: str,
        weight: int,
        description: str,
        labels: Sequence[str],
        caller: str,
        now: int,
    ) -> Unit:
        """Validate and insert a new unit owned by ``caller``.

        Returns the stored unit. Nothing is written if validation fails.
        """
        self._validate_fields(signature, weight, description, labels)

        unit_id = self.total_units + 1
        if unit_id in self._units:
            # total_units tracks the highest id, so this means corruption
            raise RuntimeError(f"unit id {unit_id} already allocated")

        unit = Unit(
            id=unit_id,
            signature=signature,
            owner=caller,
            weight=weight,
            description=description,
            labels=list(labels),
            created_at=now,
        )
        self._units[unit_id] = unit
        self.total_units = unit_id
        logger.debug("created unit %d for %r at height %d", unit_id, caller, now)
        return unit

    def update(
        self,
        unit_id: int,
        signature: str,
        weight: int,
        description: str,
        labels: Sequence[str],
        caller: str,
    ) -> Unit:
        """Replace the four mutable fields. Owner and created_at are kept."""
        unit = self._require_owned(unit_id, caller)
        self._validate_fields(signature, weight, description, labels)

        unit.signature = signature
        unit.weight = weight
        unit.description = description
        unit.labels = list(labels)
        logger.debug("updated unit %d", unit_id)
        return unit

    def transfer_owner(self, unit_id: int, new_owner: str, caller: str) -> Unit:
        unit = self._require_owned(unit_id, caller)
        unit.owner = new_owner
        logger.debug("unit %d transferred from %r to %r", unit_id, caller, new_owner)
        return unit

    def archive(self, unit_id: int, notes: str, caller: str) -> Unit:
        """Overwrite the description with archival notes.

        The unit stays live and readable; no other field changes.
        """
        unit = self._require_owned(unit_id, caller)
        if not valid_description(notes):
            raise InvalidEncoding("archive notes must be 1-128 characters")
        unit.description = notes
        logger.debug("archived unit %d", unit_id)
        return unit

    # ------------------------------------------------------------------
    # Reads (public, no authorization)
    # ------------------------------------------------------------------

    def get(self, unit_id: int) -> Unit:
        return self._require(unit_id).copy()

    def signature_of(self, unit_id: int) -> str:
        return self._require(unit_id).signature

    def labels_of(self, unit_id: int) -> list[str]:
        return list(self._require(unit_id).labels)

    def owner_of(self, unit_id: int) -> str:
        return self._require(unit_id).owner

    def created_at_of(self, unit_id: int) -> int:
        return self._require(unit_id).created_at

    def weight_of(self, unit_id: int) -> int:
        return self._require(unit_id).weight

    def description_of(self, unit_id: int) -> str:
        return self._require(unit_id).description

    def owned_by(self, unit_id: int, caller: str) -> Unit:
        """Return the live unit if ``caller`` owns it."""
        return self._require_owned(unit_id, caller)

    def integrity_check(self, unit_id: int) -> bool:
        """Re-check a stored unit against the field rules. Never mutates."""
        unit = self._require(unit_id)
        return (
            bool(unit.signature)
            and bool(unit.description)
            and bool(unit.labels)
            and unit.weight > 0
            and valid_label_collection(unit.labels)
        )
