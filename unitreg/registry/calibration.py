"""Calibration state — admin-only tunables consumed by analytic reads."""

from __future__ import annotations

import logging

from unitreg.registry.errors import AccessViolation, BoundaryBreach

logger = logging.getLogger(__name__)

DEFAULT_STABILITY_INDEX = 100
DEFAULT_FLUX_VALUE = 1


class CalibrationState:
    """Holds the administrator identity and the two calibration counters.

    The administrator is fixed at construction and compared by value on
    every gated call.
    """

    def __init__(
        self,
        admin: str,
        stability_index: int = DEFAULT_STABILITY_INDEX,
        flux_value: int = DEFAULT_FLUX_VALUE,
    ) -> None:
        self.admin = admin
        self.stability_index = stability_index
        self.flux_value = flux_value

    def is_admin(self, caller: str) -> bool:
        return caller == self.admin

    def _check(self, name: str, value: int, caller: str) -> None:
        if not self.is_admin(caller):
            raise AccessViolation(f"only the administrator may set {name}")
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise BoundaryBreach(f"{name} must be a positive integer")

    def set_stability_index(self, value: int, caller: str) -> None:
        self._check("stability_index", value, caller)
        logger.debug("stability_index %d -> %d", self.stability_index, value)
        self.stability_index = value

    def set_flux_value(self, value: int, caller: str) -> None:
        self._check("flux_value", value, caller)
        logger.debug("flux_value %d -> %d", self.flux_value, value)
        self.flux_value = value
