"""
depreciation_config -- YAML configuration for the depreciation engine.

``load_config()`` returns a ``DepreciationConfig`` built from a YAML file,
or from the bundled ``defaults.yaml`` when no path is given.
"""

from depreciation_config.loader import (
    DEFAULTS_PATH,
    load_config,
    load_yaml_file,
    parse_config,
)

__all__ = [
    "DEFAULTS_PATH",
    "load_config",
    "load_yaml_file",
    "parse_config",
]
