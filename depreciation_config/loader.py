"""
Configuration Loader (``depreciation_config.loader``).

Responsibility
--------------
Loads a depreciation YAML file and parses it into a
``DepreciationConfig``.  With no path, the bundled ``defaults.yaml`` is
used.

Architecture position
---------------------
**Config layer** -- sits above the modules layer.  Nothing in the kernel
or engines imports from here.

Invariants enforced
-------------------
* Unknown sections and keys raise ``ValueError`` naming the key; nothing
  is silently ignored.
* Decimal values are parsed from their string form, never through float.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key or malformed value  -> ``ValueError`` with the dotted key.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from depreciation_engines.factory import parse_method_type
from depreciation_kernel.exceptions import DepreciationError
from depreciation_kernel.logging_config import get_logger
from depreciation_modules.assets.config import DepreciationConfig

logger = get_logger("config.loader")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

# YAML section -> {yaml key: (config field, kind)}
_SECTIONS: dict[str, dict[str, tuple[str, str]]] = {
    "methods": {
        "default": ("default_method", "method"),
        "prorate_daily": ("prorate_daily", "bool"),
        "declining_switch_to_straight_line": ("declining_switch_to_straight_line", "bool"),
        "disabled": ("disabled_methods", "methods"),
    },
    "macrs": {
        "property_class": ("macrs_property_class", "int"),
        "convention": ("macrs_convention", "str"),
        "bonus_rate": ("macrs_bonus_rate", "decimal"),
    },
    "bonus": {
        "rate": ("bonus_rate", "decimal"),
    },
    "annuity": {
        "interest_rate": ("annuity_interest_rate", "decimal"),
        "include_interest_in_expense": ("annuity_include_interest", "bool"),
    },
    "tax": {
        "rate": ("tax_rate", "decimal"),
    },
    "forecast": {
        "default_periods": ("default_forecast_periods", "int"),
    },
    "revaluation": {
        "significant_change_threshold": ("significant_change_threshold", "decimal"),
    },
}

_SCALARS: dict[str, tuple[str, str]] = {
    "tier": ("tier", "str"),
    "currency": ("default_currency", "str"),
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _coerce(key: str, value: Any, kind: str) -> Any:
    if kind == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"{key} must be true or false, got {value!r}")
        return value
    if kind == "int":
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError(f"{key} must be an integer, got {value!r}")
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} must be an integer, got {value!r}") from None
    if kind == "decimal":
        if isinstance(value, bool) or value is None:
            raise ValueError(f"{key} must be a decimal, got {value!r}")
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"{key} must be a decimal, got {value!r}") from None
    if kind == "method":
        try:
            return parse_method_type(value)
        except DepreciationError:
            raise ValueError(f"{key} is not a depreciation method: {value!r}") from None
    if kind == "methods":
        if not isinstance(value, list):
            raise ValueError(f"{key} must be a list of methods, got {value!r}")
        return frozenset(_coerce(key, item, "method") for item in value)
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


def parse_config(data: dict[str, Any]) -> DepreciationConfig:
    """
    Build a ``DepreciationConfig`` from parsed YAML.

    Raises:
        ValueError: Unknown section or key, or a malformed value.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Depreciation config must be a mapping, got {type(data).__name__}")

    values: dict[str, Any] = {}
    for name, raw in data.items():
        if name in _SCALARS:
            field_name, kind = _SCALARS[name]
            values[field_name] = _coerce(name, raw, kind)
            continue
        section = _SECTIONS.get(name)
        if section is None:
            raise ValueError(f"Unknown depreciation config section: {name}")
        if not isinstance(raw, dict):
            raise ValueError(f"Section {name} must be a mapping")
        for key, value in raw.items():
            if key not in section:
                raise ValueError(f"Unknown depreciation config key: {name}.{key}")
            field_name, kind = section[key]
            values[field_name] = _coerce(f"{name}.{key}", value, kind)

    try:
        return DepreciationConfig.from_dict(values)
    except DepreciationError as exc:
        raise ValueError(f"Invalid depreciation config: {exc}") from exc


def load_config(path: Path | str | None = None) -> DepreciationConfig:
    """Load and parse a config file (the bundled defaults when ``path`` is None)."""
    source = Path(path) if path is not None else DEFAULTS_PATH
    config = parse_config(load_yaml_file(source))
    logger.info(
        "config_loaded",
        extra={
            "path": str(source),
            "tier": config.tier.name.lower(),
            "default_method": config.default_method.value,
            "disabled_methods": sorted(m.value for m in config.disabled_methods),
        },
    )
    return config
