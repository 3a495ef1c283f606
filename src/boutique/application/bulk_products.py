"""Application service: bulk product summaries for cart and checkout."""

from __future__ import annotations

from datetime import datetime, timezone

from boutique.application.dto import ProductSummaryDTO, VariantSummaryDTO
from boutique.domain.exceptions import ValidationError
from boutique.domain.model.product import Product
from boutique.domain.model.value_objects import is_valid_id
from boutique.domain.repository.catalog_repository import CatalogRepository
from boutique.domain.repository.product_repository import ProductRepository


class BulkProductSummaryHandler:

    def __init__(self, product_repo: ProductRepository, catalog_repo: CatalogRepository) -> None:
        self._product_repo = product_repo
        self._catalog_repo = catalog_repo

    def handle(self, raw_ids: list[str]) -> list[ProductSummaryDTO]:
        """Summaries in request order; unknown ids are skipped silently.

        Ids are trimmed and de-duplicated; malformed ones are dropped, and
        if none remain the request is rejected.
        """
        ids = list(dict.fromkeys(s.strip() for s in raw_ids if s and s.strip()))
        valid = [s.lower() for s in ids if is_valid_id(s)]
        if not valid:
            raise ValidationError(f"No valid ids in {ids!r}")

        found = {p.id: p for p in self._product_repo.get_many(valid)}
        now = datetime.now(timezone.utc)
        return [self._summary(found[pid], now) for pid in valid if pid in found]

    def _summary(self, product: Product, now: datetime) -> ProductSummaryDTO:
        variants = []
        for v in product.variants:
            size = self._catalog_repo.get_size(v.size_id)
            color = self._catalog_repo.get_color(v.color_id)
            variants.append(
                VariantSummaryDTO(
                    size_id=v.size_id,
                    size_label=size.label if size else "",
                    color_id=v.color_id,
                    color_name=color.name if color else "",
                    stock=v.stock,
                )
            )
        return ProductSummaryDTO(
            id=product.id,
            sku=product.sku,
            name=product.name,
            price=str(product.price),
            effective_price=str(product.effective_price(now)),
            variants=variants,
        )
