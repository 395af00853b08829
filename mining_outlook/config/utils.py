"""Shared configuration utilities."""

from pathlib import Path
from typing import Any, Dict

import yaml


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Mappings present on both sides are merged key by key; any other value in
    ``override`` (including lists such as PERT triples) replaces the base
    value. Neither input is mutated.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = deep_merge(current, value)
        merged[key] = value
    return merged


def load_yaml(path: Path) -> Dict[str, Any]:
    """Read a YAML mapping, dropping top-level keys that start with ``_``.

    Underscore keys hold YAML anchors shared by several sections.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the document is not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return {key: value for key, value in data.items() if not str(key).startswith("_")}
