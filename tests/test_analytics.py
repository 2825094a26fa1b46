"""Tests for analytic reads, calibration and description sync."""

import pytest

from unitreg.registry.engine import Registry
from unitreg.registry.errors import (
    AccessViolation,
    BoundaryBreach,
    InvalidEncoding,
    NotFound,
    NotOwner,
    StructureViolation,
)
from unitreg.registry.models import ClusterBounds


ADMIN = "deployer"


def _registry(units: int = 0) -> Registry:
    reg = Registry(ADMIN)
    for i in range(units):
        reg.create_unit(f"S{i}", 10, f"D{i}", ["x"], caller="P", now=i + 1)
    return reg


# --- Analytics ---


def test_spectral_score():
    reg = _registry()
    unit_id = reg.create_unit("abcd", 1250, "D", ["a", "b", "c"], caller="P", now=1)
    # 2*4 + 3*3 + 1250 // 100
    assert reg.spectral_score(unit_id) == 8 + 9 + 12
    assert reg.spectral_score(unit_id) == reg.spectral_score(unit_id)


def test_spectral_score_unknown():
    with pytest.raises(NotFound):
        _registry().spectral_score(1)


def test_cluster_bounds():
    assert Registry.cluster_bounds(50, 70) == ClusterBounds(lower=0, upper=120, reference=50)
    assert Registry.cluster_bounds(100, 30) == ClusterBounds(lower=70, upper=130, reference=100)
    assert _registry().cluster_bounds(5, 0) == ClusterBounds(5, 5, 5)


def test_multidimensional_property():
    reg = _registry()
    unit_id = reg.create_unit("S", 999_999_999, "D", ["x"], caller="P", now=10**12)
    assert reg.multidimensional_property(unit_id) == 999_999_999 * 10**12
    with pytest.raises(NotFound):
        reg.multidimensional_property(99)


def test_coherence_evaluation():
    reg = _registry(100)
    assert reg.coherence_evaluation() is False
    reg.create_unit("S", 1, "D", ["x"], caller="P", now=200)
    assert reg.coherence_evaluation() is True


def test_constellation_density():
    reg = _registry(7)
    assert reg.constellation_density() == 700
    reg.set_flux_value(3, caller=ADMIN)
    assert reg.constellation_density() == 7 * 100 // 3


def test_constellation_density_zero_flux():
    reg = _registry(1)
    # bypass the guarded setter
    reg.calibration.flux_value = 0
    with pytest.raises(BoundaryBreach):
        reg.constellation_density()


def test_harmonization_ceremony():
    reg = _registry(2)
    assert reg.harmonization_ceremony() == 7 * 2 + 3 * 100 + 11 * 1
    assert reg.read_total_units() == 2


# --- Calibration ---


def test_calibration_defaults():
    reg = _registry()
    assert reg.read_stability_index() == 100
    assert reg.read_flux_value() == 1
    assert reg.read_total_units() == 0
    assert reg.admin == ADMIN


def test_admin_sets_calibration():
    reg = _registry()
    reg.set_stability_index(250, caller=ADMIN)
    reg.set_flux_value(5, caller=ADMIN)
    assert reg.read_stability_index() == 250
    assert reg.read_flux_value() == 5


def test_non_admin_rejected():
    reg = _registry()
    with pytest.raises(AccessViolation):
        reg.set_stability_index(250, caller="P")
    with pytest.raises(AccessViolation):
        reg.set_flux_value(5, caller="P")
    assert reg.read_stability_index() == 100
    assert reg.read_flux_value() == 1


def test_zero_flux_rejected():
    reg = _registry(3)
    with pytest.raises(BoundaryBreach):
        reg.set_flux_value(0, caller=ADMIN)
    with pytest.raises(BoundaryBreach):
        reg.set_stability_index(0, caller=ADMIN)
    assert reg.read_flux_value() == 1
    assert reg.constellation_density() == 300


def test_negative_calibration_rejected():
    reg = _registry()
    with pytest.raises(BoundaryBreach):
        reg.set_flux_value(-1, caller=ADMIN)


def test_authorization_checked_before_range():
    with pytest.raises(AccessViolation):
        _registry().set_flux_value(0, caller="P")


def test_unit_owner_is_not_admin():
    reg = _registry()
    reg.create_unit("S", 1, "D", ["x"], caller="P", now=1)
    with pytest.raises(AccessViolation):
        reg.set_flux_value(2, caller="P")


# --- Description sync ---


def test_synchronize_descriptions_is_noop():
    reg = _registry(4)
    before = [reg.description_of(i) for i in range(1, 5)]
    reg.synchronize_descriptions(1, [2, 3, 4], "unified", caller="P")
    assert [reg.description_of(i) for i in range(1, 5)] == before


def test_synchronize_descriptions_validation():
    reg = _registry(7)
    with pytest.raises(NotFound):
        reg.synchronize_descriptions(99, [], "unified", caller="P")
    with pytest.raises(NotOwner):
        reg.synchronize_descriptions(1, [2], "unified", caller="Q")
    with pytest.raises(StructureViolation):
        reg.synchronize_descriptions(1, [2, 3, 4, 5, 6, 7], "unified", caller="P")
    with pytest.raises(NotFound):
        reg.synchronize_descriptions(1, [2, 42], "unified", caller="P")
    with pytest.raises(InvalidEncoding):
        reg.synchronize_descriptions(1, [2], "", caller="P")

    reg.synchronize_descriptions(1, [], "unified", caller="P")
    assert reg.description_of(1) == "D0"
