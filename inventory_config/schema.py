"""
Configuration schema (``inventory_config.schema``).

Frozen dataclasses describing validated runtime settings.  Instances are
produced only by ``inventory_config.loader`` via ``get_active_config()``.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass

from inventory_kernel.logging_config import get_logger

logger = get_logger("config.schema")

VALID_ROUNDING_MODES = frozenset({
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_UP,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_UP,
    decimal.ROUND_DOWN,
    decimal.ROUND_CEILING,
    decimal.ROUND_FLOOR,
})

VALID_PRICE_TIERS = frozenset({"retail", "bronze", "silver", "gold"})

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class InventorySettings:
    """
    Runtime settings for the inventory system.

    Raises ValueError from ``__post_init__`` when any value is out of range,
    so an instance that exists is always usable.
    """

    currency: str = "USD"
    cost_decimal_places: int = 4
    cost_rounding: str = decimal.ROUND_HALF_EVEN
    amount_decimal_places: int = 2
    max_order_lines: int = 200
    default_price_tier: str = "retail"
    default_low_stock_threshold: int = 5
    max_commit_attempts: int = 5
    retry_backoff_seconds: float = 0.05
    database_url: str = "sqlite:///inventory.db"
    pool_size: int = 20
    max_overflow: int = 10
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        errors: list[str] = []
        if len(self.currency) != 3 or not self.currency.isalpha() or not self.currency.isupper():
            errors.append(f"currency must be a 3-letter ISO 4217 code, got {self.currency!r}")
        if not 0 <= self.cost_decimal_places <= 9:
            errors.append(f"cost_decimal_places must be in 0..9, got {self.cost_decimal_places}")
        if self.cost_rounding not in VALID_ROUNDING_MODES:
            errors.append(f"cost_rounding must be a decimal rounding mode, got {self.cost_rounding!r}")
        if not 0 <= self.amount_decimal_places <= 9:
            errors.append(f"amount_decimal_places must be in 0..9, got {self.amount_decimal_places}")
        if self.max_order_lines < 1:
            errors.append(f"max_order_lines must be >= 1, got {self.max_order_lines}")
        if self.default_price_tier not in VALID_PRICE_TIERS:
            errors.append(f"default_price_tier must be one of {sorted(VALID_PRICE_TIERS)}")
        if self.default_low_stock_threshold < 0:
            errors.append("default_low_stock_threshold must be >= 0")
        if self.max_commit_attempts < 1:
            errors.append(f"max_commit_attempts must be >= 1, got {self.max_commit_attempts}")
        if self.retry_backoff_seconds < 0:
            errors.append("retry_backoff_seconds must be >= 0")
        if not self.database_url:
            errors.append("database_url must be set")
        if self.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of {sorted(VALID_LOG_LEVELS)}")

        if errors:
            logger.error("inventory_settings_invalid", extra={"errors": errors})
            raise ValueError(
                "Invalid inventory settings:\n" + "\n".join(f"  - {e}" for e in errors)
            )
