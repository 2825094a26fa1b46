"""Scenario runner — replays host invocations against a fresh registry.

The runner plays the host role: it supplies each step's caller identity
and ledger height, invokes the registry operation, and compares the
outcome with the step's expectation.
"""

from __future__ import annotations

import inspect
from dataclasses import asdict, dataclass, is_dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from unitreg.registry.engine import Registry
from unitreg.registry.errors import RegistryError
from unitreg.scenario.models import OPERATIONS, Scenario, ScenarioStep
from unitreg.security.audit_log import AuditLogger


class ScenarioError(Exception):
    """The scenario itself is malformed (as opposed to a registry failure)."""


@dataclass
class StepResult:
    """Outcome of one replayed step."""

    index: int
    op: str
    caller: str
    height: int
    ok: bool
    value: Any = None
    error_kind: str = ""
    error_detail: str = ""
    matched: bool = True


@dataclass
class ScenarioReport:
    """Outcome of a full scenario run."""

    name: str
    results: list[StepResult]

    @property
    def passed(self) -> bool:
        return all(r.matched for r in self.results)

    @property
    def mismatches(self) -> list[StepResult]:
        return [r for r in self.results if not r.matched]

    def summary(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return (
            f"[{status}] {len(self.results)} step(s), "
            f"{len(self.mismatches)} mismatch(es)"
        )


def load_scenario(path: str | Path) -> Scenario:
    """Parse and validate a scenario YAML file."""
    path = Path(path)
    if not path.exists():
        raise ScenarioError(f"Scenario file not found: {path}")
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ScenarioError(f"Invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ScenarioError("Scenario must be a mapping with 'admin' and 'steps'")
    try:
        return Scenario.model_validate(data)
    except ValidationError as e:
        raise ScenarioError(str(e)) from e


def _normalize(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, tuple):
        return list(value)
    return value


class ScenarioRunner:
    """Replays a scenario step by step."""

    def __init__(
        self,
        scenario: Scenario,
        admin: Optional[str] = None,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.scenario = scenario
        self.registry = Registry(
            admin or scenario.admin,
            stability_index=scenario.stability_index,
            flux_value=scenario.flux_value,
            audit=audit,
        )
        self._height = 0

    def run(self) -> ScenarioReport:
        results = [
            self._run_step(i + 1, step) for i, step in enumerate(self.scenario.steps)
        ]
        return ScenarioReport(name=self.scenario.name, results=results)

    def _call_args(self, step: ScenarioStep) -> dict[str, Any]:
        takes_caller, takes_height = OPERATIONS[step.op]
        kwargs = dict(step.args)
        if takes_caller:
            kwargs["caller"] = step.caller
        if takes_height:
            kwargs["now"] = self._height
        return kwargs

    def _run_step(self, index: int, step: ScenarioStep) -> StepResult:
        if step.height is not None:
            self._height = step.height

        method = getattr(self.registry, step.op)
        kwargs = self._call_args(step)
        try:
            inspect.signature(method).bind(**kwargs)
        except TypeError as e:
            raise ScenarioError(f"step {index} ({step.op}): {e}") from e

        result = StepResult(
            index=index, op=step.op, caller=step.caller, height=self._height, ok=True
        )
        try:
            result.value = _normalize(method(**kwargs))
        except RegistryError as exc:
            result.ok = False
            result.error_kind = exc.kind.value
            result.error_detail = exc.detail
        except (TypeError, ValueError) as e:
            # argument of the wrong type, e.g. a scalar where a list belongs
            raise ScenarioError(f"step {index} ({step.op}): {e}") from e

        if step.expect_error is not None:
            result.matched = not result.ok and result.error_kind == step.expect_error.value
        elif step.has_expectation:
            result.matched = result.ok and result.value == _normalize(step.expect)
        else:
            result.matched = result.ok
        return result
