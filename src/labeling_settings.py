"""
Configuration loading for the labeling pipeline.
"""
from __future__ import annotations

import os
from typing import Any, Dict

import yaml

LABELING_DEFAULTS: Dict[str, Any] = {"max_component": 4096}

BLOB_DEFAULTS: Dict[str, Any] = {
    "min_area": 1,
    "max_area": 100000,
    "eccentricity_range": [0.0, 1.0],
}


def load_settings(path: str) -> Dict[str, Any]:
    """Load a YAML configuration file."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if not isinstance(data, dict):
        raise ValueError("Settings file must define a dictionary at the top level")

    return data


def _section(settings: Dict[str, Any], name: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
    section = settings.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Settings section '{name}' must be a dictionary")
    merged = dict(defaults)
    merged.update(section)
    return merged


def labeling_options(settings: Dict[str, Any]) -> Dict[str, Any]:
    options = _section(settings, "labeling", LABELING_DEFAULTS)
    max_component = int(options["max_component"])
    if max_component <= 0:
        raise ValueError("labeling.max_component must be a positive integer")
    options["max_component"] = max_component
    return options


def blob_options(settings: Dict[str, Any]) -> Dict[str, Any]:
    options = _section(settings, "blob", BLOB_DEFAULTS)
    ecc_range = options["eccentricity_range"]
    if len(ecc_range) != 2:
        raise ValueError("blob.eccentricity_range must hold exactly two values")
    options["min_area"] = int(options["min_area"])
    options["max_area"] = int(options["max_area"])
    options["eccentricity_range"] = (float(ecc_range[0]), float(ecc_range[1]))
    return options
