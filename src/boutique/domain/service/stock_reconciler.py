"""Domain service: Stock Reconciler.

Decrements variant stock for the lines of an order attempt, one line at a
time, relying only on the store's atomic single-variant increment:

  1. read the variant and its stock
  2. refuse if the request exceeds it
  3. decrement unconditionally
  4. re-read; if the result went negative a concurrent order won the
     race, so the decrement is given back and the line fails

The write never carries a range condition on stock. The guarantee comes
from verifying the post-state and compensating.

Every decrement applied during an attempt is remembered so that, if any
later step fails (another line, or the caller persisting the order), all
of them are reverted.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from boutique.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    RaceLostStockError,
)
from boutique.domain.model.product import Product
from boutique.domain.model.value_objects import Quantity, VariantKey
from boutique.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockLine:
    """Input: decrement *quantity* units of the variant at *key*."""

    key: VariantKey
    quantity: Quantity


@dataclass(frozen=True)
class ReconciledLine:
    """Output: a line whose stock was taken, with the reads around it."""

    key: VariantKey
    quantity: Quantity
    product: Product
    stock_before: int
    stock_after: int


@dataclass
class Reconciliation:
    """The lines taken by one attempt; hand it back to ``compensate``."""

    lines: list[ReconciledLine] = field(default_factory=list)


def merge_lines(lines: list[StockLine]) -> list[StockLine]:
    """Merge lines naming the same variant, keeping first-seen order."""
    merged: dict[VariantKey, int] = {}
    for line in lines:
        merged[line.key] = merged.get(line.key, 0) + line.quantity.value
    return [StockLine(key, Quantity(qty)) for key, qty in merged.items()]


class StockReconciler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def decrement(self, lines: list[StockLine]) -> Reconciliation:
        """Take stock for every line, or for none of them.

        Lines are processed strictly in order. On any failure the
        decrements already applied are compensated before the error
        propagates.
        """
        reconciliation = Reconciliation()
        try:
            for line in merge_lines(lines):
                reconciliation.lines.append(self._decrement_line(line))
        except Exception:
            self.compensate(reconciliation)
            raise
        return reconciliation

    def compensate(self, reconciliation: Reconciliation) -> None:
        """Give back every decrement of an attempt, newest first.

        Best-effort: a failed compensation is logged and the next one is
        still attempted; nothing is raised.
        """
        for line in reversed(reconciliation.lines):
            try:
                matched = self._product_repo.increment_variant_stock(
                    line.key, line.quantity.value
                )
                if not matched:
                    logger.error(
                        "Stock compensation found no variant",
                        variant=str(line.key),
                        quantity=line.quantity.value,
                    )
            except Exception:
                logger.exception(
                    "Stock compensation failed",
                    variant=str(line.key),
                    quantity=line.quantity.value,
                )
        reconciliation.lines.clear()

    # --- Internal helpers -----------------------------------------------------

    def _decrement_line(self, line: StockLine) -> ReconciledLine:
        key, qty = line.key, line.quantity.value

        product = self._product_repo.get_by_id(key.product_id)
        variant = product.find_variant(key.size_id, key.color_id) if product else None
        if product is None or variant is None:
            raise EntityNotFoundError(
                f"Variant not available for product '{key.product_id}'"
            )

        stock_before = variant.stock
        if qty > stock_before:
            raise InsufficientStockError(product.id, product.name, qty, stock_before)

        if not self._product_repo.increment_variant_stock(key, -qty):
            raise RaceLostStockError(product.id, product.name)

        stock_after = self._product_repo.get_variant_stock(key)
        if stock_after is None:
            # Variant removed between the write and the re-read.
            raise RaceLostStockError(product.id, product.name)
        if stock_after < 0:
            self._product_repo.increment_variant_stock(key, qty)
            logger.warning(
                "Lost stock race, decrement reverted",
                variant=str(key),
                quantity=qty,
                stock_after=stock_after,
            )
            raise RaceLostStockError(product.id, product.name)

        return ReconciledLine(key, line.quantity, product, stock_before, stock_after)
