"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from boutique.domain.model.order import OrderStatus


class ConfigurationError(Exception):
    """An environment variable holds a value that cannot be used."""


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    low_stock_threshold: int = 3
    sla_hours: dict[OrderStatus, int] = field(
        default_factory=lambda: {
            OrderStatus.PENDING: 72,
            OrderStatus.INVOICED: 72,
            OrderStatus.SHIPPED: 72,
        }
    )
    renotify_hours: int = 24
    sweep_interval_seconds: int = 3600
    environment: str = "development"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            data_dir=Path(os.getenv("BOUTIQUE_DATA_DIR") or "data"),
            low_stock_threshold=_int_env("LOW_STOCK_THRESHOLD", 3),
            sla_hours={
                OrderStatus.PENDING: _int_env("ORDER_SLA_PENDING_HOURS", 72, minimum=1),
                OrderStatus.INVOICED: _int_env("ORDER_SLA_INVOICED_HOURS", 72, minimum=1),
                OrderStatus.SHIPPED: _int_env("ORDER_SLA_SHIPPED_HOURS", 72, minimum=1),
            },
            renotify_hours=_int_env("ORDER_STALE_RENOTIFY_HOURS", 24),
            sweep_interval_seconds=_int_env("ORDER_STALE_SWEEP_INTERVAL_SECONDS", 3600, minimum=1),
            environment=(os.getenv("ENVIRONMENT") or "development").lower(),
        )
