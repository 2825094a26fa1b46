"""Registry data models — units, access grants, interconnections."""

from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass
class Unit:
    """A single row of the unit store."""

    id: int
    signature: str
    owner: str
    weight: int
    description: str
    labels: list[str] = field(default_factory=list)
    created_at: int = 0

    def copy(self) -> Unit:
        """Return a detached copy; the label list is not shared."""
        return replace(self, labels=list(self.labels))


@dataclass(frozen=True)
class AccessGrant:
    """An advisory per-unit, per-accessor permission flag."""

    unit_id: int
    accessor: str
    allowed: bool = True


@dataclass(frozen=True)
class Interconnection:
    """A directed, weighted, typed relation between two units."""

    primary_id: int
    secondary_id: int
    intensity: int
    kind: str

    @property
    def key(self) -> tuple[int, int]:
        return (self.primary_id, self.secondary_id)


@dataclass(frozen=True)
class ClusterBounds:
    """Weight window around a reference weight."""

    lower: int
    upper: int
    reference: int
