"""Append-only audit records for variants and products.

Entries carry denormalised label snapshots (size label, color name, SKU)
so history stays readable after the referenced size, color or variant is
deleted from the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any


class LedgerEventType(Enum):
    CREATE_VARIANT = "CREATE_VARIANT"
    ADD_STOCK = "ADD_STOCK"
    EDIT_STOCK = "EDIT_STOCK"
    DELETE_VARIANT = "DELETE_VARIANT"
    UPDATE_PRICE_SNAPSHOT = "UPDATE_PRICE_SNAPSHOT"


class LedgerStatus(Enum):
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"


@dataclass(frozen=True)
class VariantLedgerEntry:
    id: str
    product_id: str
    size_id: str | None
    color_id: str | None
    size_label_snapshot: str
    color_name_snapshot: str
    variant_key: str
    event_type: LedgerEventType
    status: LedgerStatus = LedgerStatus.ACTIVE
    prev_stock: int | None = None
    new_stock: int | None = None
    price_snapshot: Decimal | None = None
    sku_snapshot: str = ""
    note: str = ""
    actor: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AuditAction(Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class ProductAuditEntry:
    """Product-level field changes: ``{field: {"old": ..., "new": ...}}``."""

    id: str
    product_id: str
    action: AuditAction
    changes: dict[str, dict[str, Any]]
    actor: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
