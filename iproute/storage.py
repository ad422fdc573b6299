"""
Design (storage.py)
- Purpose: Load settings and route files from disk (JSON).
- Inputs: Path of the settings file; paths of route files.
- Outputs: Settings on load_settings(); Batch on load_batch().
- Side effects: Reads files.
- Thread-safety: Call from main thread only (before and between batches).
"""

import json
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

from .errors import ConfigurationError, RouteFileError
from .models import Batch, Settings

# settings file key -> Settings field
_SETTINGS_KEYS = {
    "gateway": "gateway",
    "interface": "interface",
    "default_gw": "default_gateway",
    "default_interface": "default_interface",
    "worker_count": "worker_count",
    "debug": "debug",
    "notify": "notify",
    "route_files": "route_files",
    "default_route_files": "default_route_files",
    "duplicates_dir": "duplicates_dir",
}

_STR_FIELDS = {"gateway", "interface", "default_gateway", "default_interface", "duplicates_dir"}
_BOOL_FIELDS = {"debug", "notify"}
_LIST_FIELDS = {"route_files", "default_route_files"}


def _coerce(name: str, value: Any) -> Any:
    if name in _STR_FIELDS:
        if not isinstance(value, str):
            raise ConfigurationError(f"invalid {name} value {value!r}: expected a string")
        return value.strip()
    if name in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ConfigurationError(f"invalid {name} value {value!r}: expected true or false")
        return value
    if name in _LIST_FIELDS:
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ConfigurationError(f"invalid {name} value {value!r}: expected a list of paths")
        return tuple(value)
    if name == "worker_count":
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigurationError(f"invalid worker_count value {value!r}: expected a positive integer")
        return value
    return value


def build_settings(values: Mapping[str, Any], base: Settings | None = None) -> Settings:
    """
    Purpose: Apply {Settings field -> value} overrides on top of base (defaults if None).
             None values are ignored so unset CLI flags keep the file value.
    Raises: ConfigurationError on unknown fields or wrongly typed values.
    """
    known = {f.name for f in fields(Settings)}
    changes: Dict[str, Any] = {}
    for name, value in values.items():
        if name not in known:
            raise ConfigurationError(f"unknown setting '{name}'")
        if value is None:
            continue
        changes[name] = _coerce(name, value)
    return replace(base or Settings(), **changes)


def load_settings(path: Path) -> Settings:
    """
    Load settings from a JSON object file. Unlike route files, any problem here is fatal.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigurationError(f"cannot read config {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"invalid JSON in config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"config {path} must contain a JSON object")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        name = _SETTINGS_KEYS.get(key)
        if name is None:
            raise ConfigurationError(f"unknown key '{key}' in config {path}")
        values[name] = value
    return build_settings(values)


def load_batch(path: Path) -> Batch:
    """
    Load one route file (a JSON array of destination strings) as a Batch named after the file.
    Raises RouteFileError; the caller skips the file and moves on.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise RouteFileError(str(path), f"error reading file: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RouteFileError(str(path), f"error parsing JSON: {exc}") from exc
    if not isinstance(data, list):
        raise RouteFileError(str(path), "expected a JSON array of destinations")
    for item in data:
        if not isinstance(item, str):
            raise RouteFileError(str(path), f"destination {item!r} is not a string")
    return Batch(name=path.name, destinations=tuple(data))
