"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal

from boutique.domain.exceptions import ConflictError
from boutique.domain.model.product import Discount, DiscountType, Product, Variant
from boutique.domain.model.value_objects import Money, VariantKey
from boutique.domain.repository.product_repository import ProductRepository
from boutique.infrastructure.persistence.json_store import JsonFile, iso, parse_dt


class JsonProductRepository(ProductRepository):

    def __init__(self, store: JsonFile) -> None:
        self._store = store

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._store.read():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def get_many(self, product_ids: list[str]) -> list[Product]:
        wanted = set(product_ids)
        return [self._to_domain(raw) for raw in self._store.read() if raw["id"] in wanted]

    def get_by_sku(self, sku: str) -> Product | None:
        for raw in self._store.read():
            if raw["sku"].lower() == sku.lower():
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._store.read()]

    def save(self, product: Product) -> None:
        with self._store.editing() as rows:
            for raw in rows:
                if raw["id"] != product.id and raw["sku"].lower() == product.sku.lower():
                    raise ConflictError(f"SKU '{product.sku}' already exists")

            # Upsert: replace if exists, otherwise append
            for i, raw in enumerate(rows):
                if raw["id"] == product.id:
                    rows[i] = self._to_raw(product)
                    break
            else:
                rows.append(self._to_raw(product))

    # --- Atomic single-document operations ------------------------------------

    def get_variant_stock(self, key: VariantKey) -> int | None:
        for raw in self._store.read():
            variant = self._raw_variant(raw, key)
            if variant is not None:
                return variant["stock"]
        return None

    def increment_variant_stock(self, key: VariantKey, delta: int) -> bool:
        with self._store.editing() as rows:
            for raw in rows:
                variant = self._raw_variant(raw, key)
                if variant is not None:
                    variant["stock"] += delta
                    return True
        return False

    def set_variant_stock(self, key: VariantKey, stock: int) -> bool:
        with self._store.editing() as rows:
            for raw in rows:
                variant = self._raw_variant(raw, key)
                if variant is not None:
                    variant["stock"] = stock
                    return True
        return False

    def increment_sales_count(self, product_id: str, quantity: int) -> bool:
        with self._store.editing() as rows:
            for raw in rows:
                if raw["id"] == product_id:
                    raw["sales_count"] = raw.get("sales_count", 0) + quantity
                    return True
        return False

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _raw_variant(raw: dict, key: VariantKey) -> dict | None:
        if raw["id"] != key.product_id:
            return None
        for variant in raw["variants"]:
            if variant["size_id"] == key.size_id and variant["color_id"] == key.color_id:
                return variant
        return None

    @staticmethod
    def _to_raw(product: Product) -> dict:
        d = product.discount
        return {
            "id": product.id,
            "sku": product.sku,
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "discount": {
                "enabled": d.enabled,
                "type": d.type.value,
                "value": str(d.value),
                "start_at": iso(d.start_at),
                "end_at": iso(d.end_at),
            },
            "variants": [
                {"size_id": v.size_id, "color_id": v.color_id, "stock": v.stock}
                for v in product.variants
            ],
            "sales_count": product.sales_count,
            "created_at": iso(product.created_at),
            "updated_at": iso(product.updated_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        d = raw.get("discount") or {}
        return Product(
            id=raw["id"],
            sku=raw["sku"],
            name=raw["name"],
            price=Money(Decimal(raw["price"]), raw.get("currency", "USD")),
            variants=[
                Variant(size_id=v["size_id"], color_id=v["color_id"], stock=v["stock"])
                for v in raw["variants"]
            ],
            discount=Discount(
                enabled=d.get("enabled", False),
                type=DiscountType(d.get("type", "PERCENT")),
                value=Decimal(d.get("value", "0")),
                start_at=parse_dt(d.get("start_at")),
                end_at=parse_dt(d.get("end_at")),
            ),
            sales_count=raw.get("sales_count", 0),
            created_at=parse_dt(raw["created_at"]),
            updated_at=parse_dt(raw["updated_at"]),
        )
