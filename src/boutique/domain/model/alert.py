"""AdminAlert: notifications derived from stock levels and order state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class AlertType(Enum):
    OUT_OF_STOCK_VARIANT = "OUT_OF_STOCK_VARIANT"
    LOW_STOCK_VARIANT = "LOW_STOCK_VARIANT"
    ORDER_STALE_STATUS = "ORDER_STALE_STATUS"
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_STATUS_CHANGED = "ORDER_STATUS_CHANGED"


@dataclass
class AdminAlert:
    """Only ``seen`` changes after creation."""

    id: str | None
    type: AlertType
    message: str
    product_id: str | None = None
    size_id: str | None = None
    color_id: str | None = None
    order_id: str | None = None
    order_status: str | None = None
    seen: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def mark_seen(self) -> None:
        self.seen = True
