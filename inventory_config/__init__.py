"""
inventory_config: single public entrypoint for inventory configuration.

Responsibility:
    ``get_active_config()`` is the ONLY way to obtain settings at runtime.
    No other component reads configuration files or environment variables.

Layering:
    packaged ``defaults.yaml``  <  site YAML file  <  INVENTORY_DATABASE_URL
    <  explicit ``overrides``

Audit relevance:
    Every call emits an ``INVENTORY_CONFIG_TRACE`` log entry with the
    checksum of the effective settings, tying each run to the exact
    configuration that governed its rounding and retry behavior.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import Any

from inventory_config.loader import (
    DEFAULTS_PATH,
    compute_checksum,
    flatten_settings,
    load_yaml_file,
    parse_settings,
)
from inventory_config.schema import InventorySettings

_logger = logging.getLogger("inventory_kernel.config")

DATABASE_URL_ENV = "INVENTORY_DATABASE_URL"


def get_active_config(
    config_path: Path | str | None = None,
    overrides: dict[str, Any] | None = None,
) -> InventorySettings:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Optional site YAML file layered over the defaults.
        overrides: Field-name overrides applied last (tests, CLI flags).

    Returns:
        Validated, frozen InventorySettings.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ValueError: On unknown keys or out-of-range values.
    """
    flat = flatten_settings(load_yaml_file(DEFAULTS_PATH))
    sources = [str(DEFAULTS_PATH)]

    if config_path is not None:
        flat.update(flatten_settings(load_yaml_file(Path(config_path))))
        sources.append(str(config_path))

    env_url = os.environ.get(DATABASE_URL_ENV)
    if env_url:
        flat["database_url"] = env_url
        sources.append(f"env:{DATABASE_URL_ENV}")

    if overrides:
        flat.update(overrides)
        sources.append("overrides")

    settings = parse_settings(flat)

    trace = dataclasses.asdict(settings)
    trace.pop("database_url")
    _logger.info(
        "INVENTORY_CONFIG_TRACE",
        extra={
            "trace_type": "INVENTORY_CONFIG_TRACE",
            "checksum": compute_checksum(trace),
            "sources": sources,
            "currency": settings.currency,
            "cost_decimal_places": settings.cost_decimal_places,
            "cost_rounding": settings.cost_rounding,
            "max_commit_attempts": settings.max_commit_attempts,
        },
    )
    return settings


__all__ = ["get_active_config", "InventorySettings"]
