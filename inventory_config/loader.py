"""
Settings Loader (``inventory_config.loader``).

Responsibility
--------------
Loads YAML settings files, applies environment overrides and parses the
result into the typed ``inventory_config.schema`` dataclasses.  The single
public entry point for runtime settings is ``inventory_config.get_settings()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Unknown keys are rejected with ``ValueError`` so a typo never silently
  falls back to a default.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the merged
  settings for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Bad value types  -> ``ValueError``.
"""

from __future__ import annotations

import copy
import hashlib
import json
from collections.abc import Mapping
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    ClosingSettings,
    DatabaseSettings,
    LoggingSettings,
    PaginationSettings,
    Settings,
)

# Environment variable -> (section, key, parser)
ENV_OVERRIDES: dict[str, tuple[str, str, str]] = {
    "INVENTORY_DATABASE_URL": ("database", "url", "str"),
    "INVENTORY_SQL_ECHO": ("database", "echo", "bool"),
    "INVENTORY_LOG_LEVEL": ("logging", "level", "str"),
}

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})

_SECTIONS: dict[str, type] = {
    "database": DatabaseSettings,
    "logging": LoggingSettings,
    "pagination": PaginationSettings,
    "closing": ClosingSettings,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot parse boolean from {value!r}")


def apply_env_overrides(
    data: Mapping[str, Any],
    environ: Mapping[str, str],
) -> dict[str, Any]:
    """Return ``data`` with every set ``INVENTORY_*`` override applied."""
    result = copy.deepcopy(dict(data))
    for env_name, (section, key, kind) in ENV_OVERRIDES.items():
        if env_name not in environ:
            continue
        raw = environ[env_name]
        value: Any = parse_bool(raw) if kind == "bool" else raw
        result.setdefault(section, {})[key] = value
    return result


def _parse_section(name: str, cls: type, data: Any) -> Any:
    if data is None:
        return cls()
    if not isinstance(data, Mapping):
        raise ValueError(f"Settings section {name!r} must be a mapping")

    known = {f.name: f for f in fields(cls)}
    unknown = set(data) - set(known)
    if unknown:
        raise ValueError(
            f"Unknown keys in settings section {name!r}: {sorted(unknown)}"
        )

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        default = getattr(cls(), key)
        if isinstance(default, bool):
            kwargs[key] = parse_bool(value)
        elif isinstance(default, int):
            try:
                kwargs[key] = int(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name}.{key} must be an integer") from exc
        else:
            kwargs[key] = str(value)
    return cls(**kwargs)


def parse_settings(data: Mapping[str, Any]) -> Settings:
    """
    Parse a merged settings dict into ``Settings``.

    Raises:
        ValueError: unknown section or key, or a value of the wrong type.
    """
    unknown = set(data) - set(_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown settings sections: {sorted(unknown)}")

    sections = {
        name: _parse_section(name, cls, data.get(name))
        for name, cls in _SECTIONS.items()
    }
    settings = Settings(**sections, checksum=compute_checksum(dict(data)))

    if settings.pagination.default_limit > settings.pagination.max_limit:
        raise ValueError("pagination.default_limit cannot exceed pagination.max_limit")
    if settings.closing.min_justification_length < 1:
        raise ValueError("closing.min_justification_length must be at least 1")
    return settings


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
