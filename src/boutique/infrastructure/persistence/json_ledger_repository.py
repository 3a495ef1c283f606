"""JSON-file-backed ledger and audit repositories (append-only)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from boutique.domain.model.ledger import (
    AuditAction,
    LedgerEventType,
    LedgerStatus,
    ProductAuditEntry,
    VariantLedgerEntry,
)
from boutique.domain.repository.ledger_repository import (
    ProductAuditRepository,
    VariantLedgerRepository,
)
from boutique.infrastructure.persistence.json_store import JsonFile, iso, parse_dt


class JsonVariantLedgerRepository(VariantLedgerRepository):

    def __init__(self, store: JsonFile) -> None:
        self._store = store

    def append(self, entries: list[VariantLedgerEntry]) -> None:
        if not entries:
            return
        with self._store.editing() as rows:
            rows.extend(self._to_raw(entry) for entry in entries)

    def list_for_product(
        self,
        product_id: str,
        variant_key: str | None = None,
        status: LedgerStatus | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int = 200,
    ) -> list[VariantLedgerEntry]:
        entries = []
        for raw in self._store.read():
            if raw["product_id"] != product_id:
                continue
            if variant_key is not None and raw["variant_key"] != variant_key:
                continue
            if status is not None and raw["status"] != status.value:
                continue
            entry = self._to_domain(raw)
            if since is not None and entry.created_at < since:
                continue
            if until is not None and entry.created_at > until:
                continue
            entries.append(entry)
        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries[:limit]

    @staticmethod
    def _to_raw(entry: VariantLedgerEntry) -> dict:
        return {
            "id": entry.id,
            "product_id": entry.product_id,
            "size_id": entry.size_id,
            "color_id": entry.color_id,
            "size_label_snapshot": entry.size_label_snapshot,
            "color_name_snapshot": entry.color_name_snapshot,
            "variant_key": entry.variant_key,
            "event_type": entry.event_type.value,
            "status": entry.status.value,
            "prev_stock": entry.prev_stock,
            "new_stock": entry.new_stock,
            "price_snapshot": str(entry.price_snapshot) if entry.price_snapshot is not None else None,
            "sku_snapshot": entry.sku_snapshot,
            "note": entry.note,
            "actor": entry.actor,
            "created_at": iso(entry.created_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> VariantLedgerEntry:
        price = raw.get("price_snapshot")
        return VariantLedgerEntry(
            id=raw["id"],
            product_id=raw["product_id"],
            size_id=raw.get("size_id"),
            color_id=raw.get("color_id"),
            size_label_snapshot=raw["size_label_snapshot"],
            color_name_snapshot=raw["color_name_snapshot"],
            variant_key=raw["variant_key"],
            event_type=LedgerEventType(raw["event_type"]),
            status=LedgerStatus(raw["status"]),
            prev_stock=raw.get("prev_stock"),
            new_stock=raw.get("new_stock"),
            price_snapshot=Decimal(price) if price is not None else None,
            sku_snapshot=raw.get("sku_snapshot", ""),
            note=raw.get("note", ""),
            actor=raw.get("actor"),
            created_at=parse_dt(raw["created_at"]),
        )


class JsonProductAuditRepository(ProductAuditRepository):

    def __init__(self, store: JsonFile) -> None:
        self._store = store

    def append(self, entry: ProductAuditEntry) -> None:
        with self._store.editing() as rows:
            rows.append(
                {
                    "id": entry.id,
                    "product_id": entry.product_id,
                    "action": entry.action.value,
                    "changes": entry.changes,
                    "actor": entry.actor,
                    "created_at": iso(entry.created_at),
                }
            )

    def list_for_product(self, product_id: str) -> list[ProductAuditEntry]:
        entries = [
            ProductAuditEntry(
                id=raw["id"],
                product_id=raw["product_id"],
                action=AuditAction(raw["action"]),
                changes=raw["changes"],
                actor=raw.get("actor"),
                created_at=parse_dt(raw["created_at"]),
            )
            for raw in self._store.read()
            if raw["product_id"] == product_id
        ]
        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries
