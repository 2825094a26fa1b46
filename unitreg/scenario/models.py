"""Pydantic models for scenario files.

A scenario is a YAML document replayed against a fresh registry::

    admin: deployer
    steps:
      - op: create_unit
        caller: alice
        height: 10
        args: {signature: S1, weight: 50, description: D1, labels: [x]}
        expect: 1
      - op: set_flux_value
        caller: deployer
        args: {value: 0}
        expect_error: boundary_breach
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from unitreg.registry.errors import ErrorKind


# Operations the host may invoke, mapped to the host inputs each one takes.
OPERATIONS: dict[str, tuple[bool, bool]] = {
    # op: (takes caller, takes ledger height)
    "create_unit": (True, True),
    "update_unit": (True, False),
    "transfer_owner": (True, False),
    "archive_unit": (True, False),
    "link_units": (True, False),
    "set_stability_index": (True, False),
    "set_flux_value": (True, False),
    "synchronize_descriptions": (True, False),
    "get_unit": (False, False),
    "signature_of": (False, False),
    "labels_of": (False, False),
    "owner_of": (False, False),
    "created_at_of": (False, False),
    "weight_of": (False, False),
    "description_of": (False, False),
    "integrity_check": (False, False),
    "check_access": (False, False),
    "spectral_score": (False, False),
    "cluster_bounds": (False, False),
    "multidimensional_property": (False, False),
    "coherence_evaluation": (False, False),
    "constellation_density": (False, False),
    "harmonization_ceremony": (False, False),
    "read_stability_index": (False, False),
    "read_flux_value": (False, False),
    "read_total_units": (False, False),
}


class ScenarioStep(BaseModel):
    """One host invocation."""

    op: str
    caller: str = ""
    height: Optional[int] = None
    args: dict[str, Any] = Field(default_factory=dict)
    expect: Any = None
    expect_error: Optional[ErrorKind] = None

    @field_validator("op")
    @classmethod
    def _known_op(cls, v: str) -> str:
        if v not in OPERATIONS:
            raise ValueError(f"unknown operation '{v}'")
        return v

    @field_validator("height")
    @classmethod
    def _non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("height must be >= 0")
        return v

    @model_validator(mode="after")
    def _caller_when_needed(self) -> ScenarioStep:
        takes_caller, _ = OPERATIONS[self.op]
        if takes_caller and not self.caller and self.op != "link_units":
            raise ValueError(f"operation '{self.op}' requires a caller")
        if self.expect_error is not None and "expect" in self.model_fields_set:
            raise ValueError("a step may declare 'expect' or 'expect_error', not both")
        return self

    @property
    def has_expectation(self) -> bool:
        return "expect" in self.model_fields_set


class Scenario(BaseModel):
    """A full scenario: the administrator plus an ordered list of steps."""

    name: str = ""
    admin: str
    stability_index: int = Field(default=100, gt=0)
    flux_value: int = Field(default=1, gt=0)
    steps: list[ScenarioStep] = Field(default_factory=list)

    @model_validator(mode="after")
    def _heights_non_decreasing(self) -> Scenario:
        last = 0
        for i, step in enumerate(self.steps):
            if step.height is None:
                continue
            if step.height < last:
                raise ValueError(
                    f"step {i + 1}: ledger height {step.height} is lower than {last}"
                )
            last = step.height
        return self
