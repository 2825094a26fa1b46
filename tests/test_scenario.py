"""Tests for scenario loading and replay."""

import tempfile
from pathlib import Path

import pytest
import yaml

from unitreg.scenario.models import Scenario
from unitreg.scenario.runner import ScenarioError, ScenarioRunner, load_scenario


def _scenario(steps: list[dict], **extra) -> Scenario:
    return Scenario.model_validate({"admin": "deployer", "steps": steps, **extra})


def _write_scenario(tmpdir: str, data: dict) -> str:
    path = Path(tmpdir) / "scenario.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return str(path)


CREATE = {
    "op": "create_unit",
    "caller": "P",
    "height": 5,
    "args": {"signature": "S1", "weight": 50, "description": "D1", "labels": ["x"]},
    "expect": 1,
}


def test_replay_matches_expectations():
    scenario = _scenario(
        [
            CREATE,
            {"op": "owner_of", "args": {"unit_id": 1}, "expect": "P"},
            {"op": "created_at_of", "args": {"unit_id": 1}, "expect": 5},
            {
                "op": "set_flux_value",
                "caller": "deployer",
                "args": {"value": 0},
                "expect_error": "boundary_breach",
            },
            {
                "op": "cluster_bounds",
                "args": {"ref_weight": 50, "tolerance": 70},
                "expect": {"lower": 0, "upper": 120, "reference": 50},
            },
        ]
    )
    report = ScenarioRunner(scenario).run()
    assert report.passed, report.mismatches
    assert "PASS" in report.summary()


def test_height_carries_forward():
    second = dict(CREATE, height=None, expect=2)
    scenario = _scenario(
        [CREATE, second, {"op": "created_at_of", "args": {"unit_id": 2}, "expect": 5}]
    )
    report = ScenarioRunner(scenario).run()
    assert report.passed
    assert report.results[1].height == 5


def test_mismatch_reported():
    scenario = _scenario(
        [
            CREATE,
            {"op": "transfer_owner", "caller": "Q", "args": {"unit_id": 1, "new_owner": "Q"}},
        ]
    )
    report = ScenarioRunner(scenario).run()
    assert not report.passed
    failed = report.mismatches[0]
    assert failed.op == "transfer_owner"
    assert failed.error_kind == "not_owner"


def test_admin_override():
    scenario = _scenario(
        [{"op": "set_flux_value", "caller": "ops", "args": {"value": 4}}]
    )
    assert not ScenarioRunner(scenario).run().passed
    assert ScenarioRunner(scenario, admin="ops").run().passed


def test_unknown_operation_rejected():
    with pytest.raises(ValueError):
        _scenario([{"op": "delete_unit", "args": {}}])


def test_missing_caller_rejected():
    with pytest.raises(ValueError):
        _scenario([dict(CREATE, caller="")])


def test_decreasing_height_rejected():
    with pytest.raises(ValueError):
        _scenario([CREATE, dict(CREATE, height=2)])


def test_bad_arguments_raise_scenario_error():
    scenario = _scenario([{"op": "owner_of", "args": {"id": 1}}])
    with pytest.raises(ScenarioError):
        ScenarioRunner(scenario).run()


def test_load_scenario_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_scenario(tmpdir, {"name": "demo", "admin": "deployer", "steps": [CREATE]})
        scenario = load_scenario(path)
        assert scenario.name == "demo"
        assert len(scenario.steps) == 1


def test_load_scenario_errors():
    with pytest.raises(ScenarioError):
        load_scenario("/nonexistent/scenario.yaml")
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_scenario(tmpdir, {"steps": []})
        with pytest.raises(ScenarioError):
            load_scenario(path)


def test_bundled_scenario_passes():
    path = Path(__file__).resolve().parent.parent / "scenarios" / "basic.yaml"
    report = ScenarioRunner(load_scenario(path)).run()
    assert report.passed, report.mismatches


def test_badly_typed_argument_raises_scenario_error():
    step = {
        "op": "synchronize_descriptions",
        "caller": "P",
        "args": {"primary_id": 1, "related_ids": 3, "unified_description": "u"},
    }
    scenario = _scenario([CREATE, step])
    with pytest.raises(ScenarioError, match="step 2"):
        ScenarioRunner(scenario).run()
