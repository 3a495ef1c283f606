"""JSON-file-backed implementation of AlertRepository."""

from __future__ import annotations

from boutique.domain.model.alert import AdminAlert, AlertType
from boutique.domain.model.value_objects import VariantKey, new_id
from boutique.domain.repository.alert_repository import AlertRepository
from boutique.infrastructure.persistence.json_store import JsonFile, iso, parse_dt


class JsonAlertRepository(AlertRepository):

    def __init__(self, store: JsonFile) -> None:
        self._store = store

    def add(self, alert: AdminAlert) -> None:
        with self._store.editing() as rows:
            if alert.id is None:
                alert.id = new_id()
            rows.append(self._to_raw(alert))

    def latest_for_variant(self, key: VariantKey, alert_type: AlertType) -> AdminAlert | None:
        return self._latest(
            lambda r: r["type"] == alert_type.value
            and r.get("product_id") == key.product_id
            and r.get("size_id") == key.size_id
            and r.get("color_id") == key.color_id
        )

    def latest_for_order_status(self, order_id: str, order_status: str) -> AdminAlert | None:
        return self._latest(
            lambda r: r["type"] == AlertType.ORDER_STALE_STATUS.value
            and r.get("order_id") == order_id
            and r.get("order_status") == order_status
        )

    def list_recent(self, limit: int, seen: bool | None = None) -> list[AdminAlert]:
        alerts = [
            self._to_domain(raw)
            for raw in self._store.read()
            if seen is None or raw["seen"] == seen
        ]
        alerts.sort(key=lambda a: a.created_at, reverse=True)
        return alerts[:limit]

    def count_unseen(self) -> int:
        return sum(1 for raw in self._store.read() if not raw["seen"])

    def mark_seen(self, alert_id: str) -> bool:
        with self._store.editing() as rows:
            for raw in rows:
                if raw["id"] == alert_id:
                    raw["seen"] = True
                    return True
        return False

    def mark_all_seen(self) -> int:
        changed = 0
        with self._store.editing() as rows:
            for raw in rows:
                if not raw["seen"]:
                    raw["seen"] = True
                    changed += 1
        return changed

    # --- Serialization --------------------------------------------------------

    def _latest(self, predicate) -> AdminAlert | None:
        matches = [self._to_domain(raw) for raw in self._store.read() if predicate(raw)]
        return max(matches, key=lambda a: a.created_at, default=None)

    @staticmethod
    def _to_raw(alert: AdminAlert) -> dict:
        return {
            "id": alert.id,
            "type": alert.type.value,
            "message": alert.message,
            "product_id": alert.product_id,
            "size_id": alert.size_id,
            "color_id": alert.color_id,
            "order_id": alert.order_id,
            "order_status": alert.order_status,
            "seen": alert.seen,
            "created_at": iso(alert.created_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> AdminAlert:
        return AdminAlert(
            id=raw["id"],
            type=AlertType(raw["type"]),
            message=raw["message"],
            product_id=raw.get("product_id"),
            size_id=raw.get("size_id"),
            color_id=raw.get("color_id"),
            order_id=raw.get("order_id"),
            order_status=raw.get("order_status"),
            seen=raw["seen"],
            created_at=parse_dt(raw["created_at"]),
        )
