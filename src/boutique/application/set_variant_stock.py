"""Application service: Set Variant Stock use case (admin)."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from boutique.application.alert_hooks import check_stock_alerts
from boutique.domain.exceptions import EntityNotFoundError, ValidationError
from boutique.domain.model.value_objects import VariantKey, require_id
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.service.alert_emitter import AlertEmitter
from boutique.domain.service.ledger_recorder import LedgerRecorder

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockEditResult:
    prev_stock: int
    new_stock: int


class SetVariantStockHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        recorder: LedgerRecorder,
        alert_emitter: AlertEmitter,
    ) -> None:
        self._product_repo = product_repo
        self._recorder = recorder
        self._alert_emitter = alert_emitter

    def handle(
        self,
        product_id: str,
        size_id: str,
        color_id: str,
        stock: int,
        actor: str | None = None,
    ) -> StockEditResult:
        """Overwrite one variant's stock and record it in the ledger."""
        key = VariantKey(
            require_id(product_id, "product id"),
            require_id(size_id, "size id"),
            require_id(color_id, "color id"),
        )
        if isinstance(stock, bool) or not isinstance(stock, int) or stock < 0:
            raise ValidationError(f"Invalid stock (must be >= 0): {stock!r}")

        product = self._product_repo.get_by_id(key.product_id)
        variant = product.find_variant(key.size_id, key.color_id) if product else None
        if product is None or variant is None:
            raise EntityNotFoundError("Variant not found")

        prev_stock = variant.stock
        if not self._product_repo.set_variant_stock(key, stock):
            raise EntityNotFoundError("Variant not found")
        variant.stock = stock

        self._recorder.stock_edited(product, variant, prev_stock, "Stock edited via dedicated operation", actor)
        logger.info("Variant stock set", variant=str(key), prev_stock=prev_stock, new_stock=stock)
        check_stock_alerts(self._alert_emitter, [key])
        return StockEditResult(prev_stock, stock)
