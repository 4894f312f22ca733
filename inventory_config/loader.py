"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into ``InventorySettings``.  Callers use
``inventory_config.get_active_config()``; nothing else reads configuration
files.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown top-level section or key  -> ``ValueError``.
* Out-of-range values  -> ``ValueError`` from ``InventorySettings``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import InventorySettings

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

# (section, key) in YAML -> InventorySettings field
_FIELD_MAP: dict[tuple[str | None, str], str] = {
    (None, "currency"): "currency",
    ("costing", "decimal_places"): "cost_decimal_places",
    ("costing", "rounding"): "cost_rounding",
    ("amounts", "decimal_places"): "amount_decimal_places",
    ("orders", "max_lines"): "max_order_lines",
    ("orders", "default_price_tier"): "default_price_tier",
    ("orders", "low_stock_threshold"): "default_low_stock_threshold",
    ("concurrency", "max_commit_attempts"): "max_commit_attempts",
    ("concurrency", "retry_backoff_seconds"): "retry_backoff_seconds",
    ("database", "url"): "database_url",
    ("database", "pool_size"): "pool_size",
    ("database", "max_overflow"): "max_overflow",
    ("logging", "level"): "log_level",
}

_SECTIONS = frozenset(section for section, _ in _FIELD_MAP if section is not None)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def flatten_settings(data: dict[str, Any]) -> dict[str, Any]:
    """
    Map the nested ``inventory:`` document onto InventorySettings field names.

    Raises:
        ValueError: On unknown sections or keys.
    """
    root = data.get("inventory", {}) if data else {}
    if not isinstance(root, dict):
        raise ValueError("'inventory' must be a mapping")

    flat: dict[str, Any] = {}
    for key, value in root.items():
        if key in _SECTIONS:
            if not isinstance(value, dict):
                raise ValueError(f"'inventory.{key}' must be a mapping")
            for sub_key, sub_value in value.items():
                field = _FIELD_MAP.get((key, sub_key))
                if field is None:
                    raise ValueError(f"Unknown setting 'inventory.{key}.{sub_key}'")
                flat[field] = sub_value
        else:
            field = _FIELD_MAP.get((None, key))
            if field is None:
                raise ValueError(f"Unknown setting 'inventory.{key}'")
            flat[field] = value
    return flat


def parse_settings(flat: dict[str, Any]) -> InventorySettings:
    """Build validated settings from a flat field dict."""
    unknown = set(flat) - set(InventorySettings.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown setting(s): {sorted(unknown)}")
    return InventorySettings(**flat)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization. Deterministic."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
