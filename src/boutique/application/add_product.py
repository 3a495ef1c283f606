"""Application service: Add Product use case."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from boutique.domain.exceptions import ConflictError, ValidationError
from boutique.domain.model.ledger import AuditAction
from boutique.domain.model.product import Discount, Product, Variant
from boutique.domain.model.value_objects import Money, new_id, require_id
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.service.ledger_recorder import LedgerRecorder

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class VariantSpec:
    """Input: one size x color combination and its stock."""

    size_id: str
    color_id: str
    stock: int


def parse_variants(specs: list[VariantSpec]) -> list[Variant]:
    variants = []
    for spec in specs:
        if isinstance(spec.stock, bool) or not isinstance(spec.stock, int):
            raise ValidationError(f"Invalid stock: {spec.stock!r}")
        variants.append(
            Variant(
                size_id=require_id(spec.size_id, "size id"),
                color_id=require_id(spec.color_id, "color id"),
                stock=spec.stock,
            )
        )
    return variants


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository, recorder: LedgerRecorder) -> None:
        self._product_repo = product_repo
        self._recorder = recorder

    def handle(
        self,
        name: str,
        price: str,
        variants: list[VariantSpec],
        sku: str | None = None,
        discount: Discount | None = None,
        actor: str | None = None,
    ) -> Product:
        """Add a new product with its initial variants.

        Every initial variant gets a CREATE_VARIANT ledger entry carrying
        its starting stock.
        """
        parsed = parse_variants(variants)
        if not parsed:
            raise ValidationError("At least one valid variant is required")

        product = Product.create(
            product_id=new_id(),
            name=name,
            price=Money.of(price),
            variants=parsed,
            sku=sku,
            discount=discount,
        )
        if self._product_repo.get_by_sku(product.sku) is not None:
            raise ConflictError(f"SKU '{product.sku}' already exists")

        self._product_repo.save(product)
        self._recorder.variants_created(product, product.variants, "Created with initial stock", actor)
        self._recorder.product_audited(
            product,
            AuditAction.CREATED,
            {
                "sku": {"old": None, "new": product.sku},
                "name": {"old": None, "new": product.name},
                "price": {"old": None, "new": str(product.price.amount)},
            },
            actor,
        )
        logger.info("Product added", product_id=product.id, sku=product.sku, variants=len(parsed))
        return product
