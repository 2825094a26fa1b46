"""Registry configuration.

The administrator identity and the initial calibration values are injected
at startup, either from a YAML file::

    registry:
      admin: deployer
      stability_index: 100
      flux_value: 1
      audit_dir: ./audit

or from ``UNITREG_*`` environment variables, which take precedence.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from unitreg.registry.calibration import DEFAULT_FLUX_VALUE, DEFAULT_STABILITY_INDEX

ENV_ADMIN = "UNITREG_ADMIN"
ENV_STABILITY_INDEX = "UNITREG_STABILITY_INDEX"
ENV_FLUX_VALUE = "UNITREG_FLUX_VALUE"
ENV_AUDIT_DIR = "UNITREG_AUDIT_DIR"


class ConfigError(ValueError):
    """Raised when configuration is missing or malformed."""


@dataclass
class RegistryConfig:
    """Startup configuration for a Registry."""

    admin: str
    stability_index: int = DEFAULT_STABILITY_INDEX
    flux_value: int = DEFAULT_FLUX_VALUE
    audit_dir: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.admin, str) or not self.admin:
            raise ConfigError("admin identity must be a non-empty string")
        for name in ("stability_index", "flux_value"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")


def _as_int(name: str, raw: Any) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def load_config(
    path: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> RegistryConfig:
    """Build a RegistryConfig from an optional YAML file plus environment.

    Environment values override file values.
    """
    env = os.environ if env is None else env
    settings: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("registry", {}), dict):
            raise ConfigError("Config must contain a 'registry' mapping")
        settings.update(data.get("registry", {}))

    if env.get(ENV_ADMIN):
        settings["admin"] = env[ENV_ADMIN]
    if env.get(ENV_STABILITY_INDEX):
        settings["stability_index"] = env[ENV_STABILITY_INDEX]
    if env.get(ENV_FLUX_VALUE):
        settings["flux_value"] = env[ENV_FLUX_VALUE]
    if env.get(ENV_AUDIT_DIR):
        settings["audit_dir"] = env[ENV_AUDIT_DIR]

    if not settings.get("admin"):
        raise ConfigError(f"No administrator configured (set 'registry.admin' or {ENV_ADMIN})")

    return RegistryConfig(
        admin=str(settings["admin"]),
        stability_index=_as_int(
            "stability_index", settings.get("stability_index", DEFAULT_STABILITY_INDEX)
        ),
        flux_value=_as_int("flux_value", settings.get("flux_value", DEFAULT_FLUX_VALUE)),
        audit_dir=str(settings.get("audit_dir") or ""),
    )
