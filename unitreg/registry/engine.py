"""Registry façade — the public operation set.

Composes the unit store, the access control table, the interconnection
table and the calibration state. Every operation runs under one
re-entrant lock, so a read-modify-write inside an operation never observes
writes from another caller, and every operation either commits fully or
raises a ``RegistryError`` having committed nothing.

The host supplies the caller identity (and, for creation, the ledger
height) as explicit arguments.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from unitreg.config import RegistryConfig
from unitreg.registry.access import AccessControlTable
from unitreg.registry.calibration import (
    DEFAULT_FLUX_VALUE,
    DEFAULT_STABILITY_INDEX,
    CalibrationState,
)
from unitreg.registry.errors import (
    BoundaryBreach,
    InvalidEncoding,
    NotFound,
    RegistryError,
    StructureViolation,
)
from unitreg.registry.interconnect import InterconnectionTable
from unitreg.registry.models import ClusterBounds, Interconnection, Unit
from unitreg.registry.unit_store import UnitStore
from unitreg.security.audit_log import AuditLogger, calibration_target, unit_target
from unitreg.utils.validator import valid_description

logger = logging.getLogger(__name__)

MAX_RELATED_UNITS = 5
COHERENCE_THRESHOLD = 100


class Registry:
    """The unit registry."""

    def __init__(
        self,
        admin: str,
        *,
        stability_index: int = DEFAULT_STABILITY_INDEX,
        flux_value: int = DEFAULT_FLUX_VALUE,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.units = UnitStore()
        self.access = AccessControlTable()
        self.interconnections = InterconnectionTable()
        self.calibration = CalibrationState(admin, stability_index, flux_value)
        self.audit = audit
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: RegistryConfig) -> Registry:
        """Build a registry (and its audit logger, if configured)."""
        audit = AuditLogger(config.audit_dir) if config.audit_dir else None
        return cls(
            config.admin,
            stability_index=config.stability_index,
            flux_value=config.flux_value,
            audit=audit,
        )

    @property
    def admin(self) -> str:
        return self.calibration.admin

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _mutation(
        self, caller: str, operation: str, target: str = "", **details: Any
    ) -> Iterator[dict[str, Any]]:
        """Serialize a mutating operation and audit its outcome.

        The yielded dict lets the body fill in a target that is only known
        after the write (unit creation).
        """
        record: dict[str, Any] = {"target": target, "details": details}
        with self._lock:
            try:
                yield record
            except RegistryError as exc:
                logger.debug("%s by %r failed: %s", operation, caller, exc.kind.value)
                self._record(caller, operation, record, error_kind=exc.kind.value)
                raise
            self._record(caller, operation, record)

    def _record(
        self, caller: str, operation: str, record: dict[str, Any], error_kind: str = ""
    ) -> None:
        """Write one audit entry.

        The table write (or the RegistryError) has already happened, so an
        unwritable trail is logged and never surfaces to the caller.
        """
        if self.audit is None:
            return
        try:
            self.audit.record(
                caller=str(caller),
                operation=operation,
                target=record["target"],
                details=record["details"],
                error_kind=error_kind,
            )
        except OSError as exc:
            logger.warning("audit entry for %s by %r not written: %s", operation, caller, exc)

    # ------------------------------------------------------------------
    # Unit lifecycle
    # ------------------------------------------------------------------

    def create_unit(
        self,
        signature: str,
        weight: int,
        description: str,
        labels: Sequence[str],
        caller: str,
        now: int,
    ) -> int:
        """Create a unit owned by ``caller`` at ledger height ``now``.

        Returns the new unit id, always ``read_total_units() + 1`` as seen
        before the call.
        """
        with self._mutation(caller, "create", height=now) as record:
            unit = self.units.create(signature, weight, description, labels, caller, now)
            self.access.grant(unit.id, caller, True)
            record["target"] = unit_target(unit.id)
            return unit.id

    def update_unit(
        self,
        unit_id: int,
        signature: str,
        weight: int,
        description: str,
        labels: Sequence[str],
        caller: str,
    ) -> None:
        with self._mutation(caller, "update", unit_target(unit_id)):
            self.units.update(unit_id, signature, weight, description, labels, caller)

    def transfer_owner(self, unit_id: int, new_owner: str, caller: str) -> None:
        with self._mutation(
            caller, "transfer_owner", unit_target(unit_id), new_owner=str(new_owner)
        ):
            self.units.transfer_owner(unit_id, new_owner, caller)

    def archive_unit(self, unit_id: int, notes: str, caller: str) -> None:
        """Mark a unit archived by overwriting its description."""
        with self._mutation(caller, "archive", unit_target(unit_id)):
            self.units.archive(unit_id, notes, caller)

    # ------------------------------------------------------------------
    # Field reads
    # ------------------------------------------------------------------

    def get_unit(self, unit_id: int) -> Unit:
        with self._lock:
            return self.units.get(unit_id)

    def signature_of(self, unit_id: int) -> str:
        with self._lock:
            return self.units.signature_of(unit_id)

    def labels_of(self, unit_id: int) -> list[str]:
        with self._lock:
            return self.units.labels_of(unit_id)

    def owner_of(self, unit_id: int) -> str:
        with self._lock:
            return self.units.owner_of(unit_id)

    def created_at_of(self, unit_id: int) -> int:
        with self._lock:
            return self.units.created_at_of(unit_id)

    def weight_of(self, unit_id: int) -> int:
        with self._lock:
            return self.units.weight_of(unit_id)

    def description_of(self, unit_id: int) -> str:
        with self._lock:
            return self.units.description_of(unit_id)

    def integrity_check(self, unit_id: int) -> bool:
        with self._lock:
            return self.units.integrity_check(unit_id)

    def check_access(self, unit_id: int, accessor: str) -> bool:
        with self._lock:
            return self.access.check_access(unit_id, accessor)

    # ------------------------------------------------------------------
    # Interconnections
    # ------------------------------------------------------------------

    def link_units(
        self,
        primary_id: int,
        secondary_id: int,
        intensity: int,
        kind: str,
        caller: str = "",
    ) -> Interconnection:
        """Insert a directed relation between two existing units.

        Linking is not ownership-gated; ``caller`` is recorded for audit.
        """
        with self._mutation(
            caller, "link", unit_target(primary_id), secondary_id=secondary_id, kind=kind
        ):
            for unit_id in (primary_id, secondary_id):
                if not self.units.exists(unit_id):
                    raise NotFound(f"unit {unit_id} does not exist")
            return self.interconnections.link(primary_id, secondary_id, intensity, kind)

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def spectral_score(self, unit_id: int) -> int:
        with self._lock:
            unit = self.units.get(unit_id)
        return 2 * len(unit.signature) + 3 * len(unit.labels) + unit.weight // 100

    @staticmethod
    def cluster_bounds(ref_weight: int, tolerance: int) -> ClusterBounds:
        return ClusterBounds(
            lower=max(ref_weight - tolerance, 0),
            upper=ref_weight + tolerance,
            reference=ref_weight,
        )

    def multidimensional_property(self, unit_id: int) -> int:
        """Return ``weight * created_at``.

        Python integers widen, so the product is exact for any height.
        """
        with self._lock:
            unit = self.units.get(unit_id)
        return unit.weight * unit.created_at

    def coherence_evaluation(self) -> bool:
        with self._lock:
            return self.units.total_units > COHERENCE_THRESHOLD

    def constellation_density(self) -> int:
        with self._lock:
            total = self.units.total_units
            stability = self.calibration.stability_index
            flux = self.calibration.flux_value
        if flux == 0:
            raise BoundaryBreach("flux_value is zero; density is undefined")
        return total * stability // flux

    def harmonization_ceremony(self) -> int:
        with self._lock:
            return (
                7 * self.units.total_units
                + 3 * self.calibration.stability_index
                + 11 * self.calibration.flux_value
            )

    # ------------------------------------------------------------------
    # Calibration
    # ------------------------------------------------------------------

    def set_stability_index(self, value: int, caller: str) -> None:
        with self._mutation(
            caller, "set_stability_index", calibration_target("stability_index"), value=value
        ):
            self.calibration.set_stability_index(value, caller)

    def set_flux_value(self, value: int, caller: str) -> None:
        with self._mutation(
            caller, "set_flux_value", calibration_target("flux_value"), value=value
        ):
            self.calibration.set_flux_value(value, caller)

    def read_stability_index(self) -> int:
        with self._lock:
            return self.calibration.stability_index

    def read_flux_value(self) -> int:
        with self._lock:
            return self.calibration.flux_value

    def read_total_units(self) -> int:
        with self._lock:
            return self.units.total_units

    # ------------------------------------------------------------------
    # Batch description sync
    # ------------------------------------------------------------------

    def synchronize_descriptions(
        self,
        primary_id: int,
        related_ids: Sequence[int],
        unified_description: str,
        caller: str,
    ) -> None:
        """Validate a batch description sync request.

        All checks run, but no unit is written: the batch update itself is
        not implemented yet.
        """
        with self._lock:
            self.units.owned_by(primary_id, caller)
            if len(related_ids) > MAX_RELATED_UNITS:
                raise StructureViolation(
                    f"at most {MAX_RELATED_UNITS} related units, got {len(related_ids)}"
                )
            for unit_id in related_ids:
                if not self.units.exists(unit_id):
                    raise NotFound(f"unit {unit_id} does not exist")
            if not valid_description(unified_description):
                raise InvalidEncoding("unified description must be 1-128 characters")
