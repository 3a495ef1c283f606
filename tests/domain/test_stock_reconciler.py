"""Tests for the StockReconciler domain service.

Covers the read / decrement / verify / compensate cycle, including a
simulated concurrent order that wins the race for the last units.
"""

import pytest

from boutique.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    RaceLostStockError,
)
from boutique.domain.model.value_objects import Quantity, VariantKey
from boutique.domain.service.stock_reconciler import StockLine, StockReconciler, merge_lines
from tests.fakes import (
    BLUE,
    JEANS,
    RED,
    SHIRT,
    SIZE_L,
    SIZE_M,
    FakeProductRepository,
    RacingProductRepository,
    make_product,
)

SHIRT_M_BLUE = VariantKey(SHIRT, SIZE_M, BLUE)
SHIRT_M_RED = VariantKey(SHIRT, SIZE_M, RED)
JEANS_L_BLUE = VariantKey(JEANS, SIZE_L, BLUE)


def _repo() -> FakeProductRepository:
    return FakeProductRepository([
        make_product(SHIRT, "Shirt", stock={(SIZE_M, BLUE): 5, (SIZE_M, RED): 1}),
        make_product(JEANS, "Jeans", "50.00", stock={(SIZE_L, BLUE): 2}),
    ])


def _line(key: VariantKey, qty: int) -> StockLine:
    return StockLine(key, Quantity(qty))


class TestMergeLines:

    def test_same_variant_is_summed_in_first_seen_order(self):
        merged = merge_lines([_line(SHIRT_M_BLUE, 1), _line(JEANS_L_BLUE, 1), _line(SHIRT_M_BLUE, 2)])
        assert [(l.key, l.quantity.value) for l in merged] == [(SHIRT_M_BLUE, 3), (JEANS_L_BLUE, 1)]


class TestDecrement:

    def test_takes_stock_for_every_line(self):
        repo = _repo()
        result = StockReconciler(repo).decrement([_line(SHIRT_M_BLUE, 2), _line(JEANS_L_BLUE, 2)])

        assert repo.stock_of(SHIRT_M_BLUE) == 3
        assert repo.stock_of(JEANS_L_BLUE) == 0
        first = result.lines[0]
        assert (first.stock_before, first.stock_after) == (5, 3)
        assert first.product.name == "Shirt"

    def test_duplicate_lines_are_checked_together(self):
        repo = _repo()
        with pytest.raises(InsufficientStockError):
            StockReconciler(repo).decrement([_line(SHIRT_M_RED, 1), _line(SHIRT_M_RED, 1)])
        assert repo.stock_of(SHIRT_M_RED) == 1

    def test_insufficient_stock_rolls_back_earlier_lines(self):
        repo = _repo()
        with pytest.raises(InsufficientStockError) as exc_info:
            StockReconciler(repo).decrement([_line(SHIRT_M_BLUE, 2), _line(JEANS_L_BLUE, 3)])

        assert exc_info.value.requested == 3
        assert exc_info.value.available == 2
        assert repo.stock_of(SHIRT_M_BLUE) == 5
        assert repo.stock_of(JEANS_L_BLUE) == 2

    def test_unknown_variant(self):
        repo = _repo()
        with pytest.raises(EntityNotFoundError, match="Variant not available"):
            StockReconciler(repo).decrement([_line(SHIRT_M_BLUE, 1), _line(VariantKey(SHIRT, SIZE_L, RED), 1)])
        assert repo.stock_of(SHIRT_M_BLUE) == 5

    def test_unknown_product(self):
        with pytest.raises(EntityNotFoundError):
            StockReconciler(_repo()).decrement([_line(VariantKey("f" * 24, SIZE_M, BLUE), 1)])

    def test_lost_race_gives_back_own_decrement(self):
        repo = RacingProductRepository(
            [make_product(SHIRT, stock={(SIZE_M, BLUE): 3})], SHIRT_M_BLUE, stolen=2
        )
        with pytest.raises(RaceLostStockError):
            StockReconciler(repo).decrement([_line(SHIRT_M_BLUE, 2)])

        # Only the competing order's units are gone.
        assert repo.raced
        assert repo.stock_of(SHIRT_M_BLUE) == 1

    def test_race_that_leaves_enough_stock_succeeds(self):
        repo = RacingProductRepository(
            [make_product(SHIRT, stock={(SIZE_M, BLUE): 5})], SHIRT_M_BLUE, stolen=2
        )
        result = StockReconciler(repo).decrement([_line(SHIRT_M_BLUE, 2)])
        assert result.lines[0].stock_after == 1
        assert repo.stock_of(SHIRT_M_BLUE) == 1


class TestCompensate:

    def test_restores_every_line_and_empties_the_attempt(self):
        repo = _repo()
        reconciler = StockReconciler(repo)
        result = reconciler.decrement([_line(SHIRT_M_BLUE, 2), _line(JEANS_L_BLUE, 1)])

        reconciler.compensate(result)

        assert repo.stock_of(SHIRT_M_BLUE) == 5
        assert repo.stock_of(JEANS_L_BLUE) == 2
        assert result.lines == []

    def test_missing_variant_does_not_stop_the_others(self):
        repo = _repo()
        reconciler = StockReconciler(repo)
        result = reconciler.decrement([_line(SHIRT_M_BLUE, 2), _line(JEANS_L_BLUE, 1)])
        repo._store.pop(JEANS)

        reconciler.compensate(result)

        assert repo.stock_of(SHIRT_M_BLUE) == 5
