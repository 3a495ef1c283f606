"""Unit tests for the Product aggregate, discounts and SKUs."""

import re
from datetime import timedelta
from decimal import Decimal

import pytest

from boutique.domain.exceptions import ValidationError
from boutique.domain.model.product import (
    Discount,
    DiscountType,
    Product,
    Variant,
    build_variant_sku,
    generate_sku,
    validate_sku,
)
from boutique.domain.model.value_objects import Money
from tests.fakes import BLUE, NOW, RED, SIZE_M


class TestDiscount:

    def test_percent(self):
        d = Discount(enabled=True, type=DiscountType.PERCENT, value=Decimal("10"))
        assert d.apply(Money.of("20.00"), NOW) == Money.of("18.00")

    def test_percent_rounds_half_up(self):
        d = Discount(enabled=True, type=DiscountType.PERCENT, value=Decimal("10"))
        assert d.apply(Money.of("9.99"), NOW).amount == Decimal("8.99")

    def test_fixed(self):
        d = Discount(enabled=True, type=DiscountType.FIXED, value=Decimal("5"))
        assert d.apply(Money.of("20.00"), NOW) == Money.of("15.00")

    def test_disabled_discount_leaves_price(self):
        d = Discount(enabled=False, type=DiscountType.FIXED, value=Decimal("5"))
        assert d.apply(Money.of("20.00"), NOW) == Money.of("20.00")

    def test_outside_window_leaves_price(self):
        d = Discount(
            enabled=True,
            type=DiscountType.PERCENT,
            value=Decimal("50"),
            start_at=NOW + timedelta(days=1),
        )
        assert not d.is_active(NOW)
        assert d.apply(Money.of("20.00"), NOW) == Money.of("20.00")

    def test_expired_window(self):
        d = Discount(enabled=True, value=Decimal("50"), end_at=NOW - timedelta(seconds=1))
        assert not d.is_active(NOW)

    def test_percent_above_90_rejected(self):
        d = Discount(enabled=True, type=DiscountType.PERCENT, value=Decimal("95"))
        with pytest.raises(ValidationError, match="between 1 and 90"):
            d.validate_against(Money.of("20"))

    def test_fixed_not_below_price_rejected(self):
        d = Discount(enabled=True, type=DiscountType.FIXED, value=Decimal("20"))
        with pytest.raises(ValidationError, match="below the price"):
            d.validate_against(Money.of("20"))

    def test_window_must_be_ordered(self):
        d = Discount(enabled=True, value=Decimal("10"), start_at=NOW, end_at=NOW)
        with pytest.raises(ValidationError, match="after its start"):
            d.validate_against(Money.of("20"))


class TestProductCreate:

    def test_generates_sku_from_name(self):
        product = Product.create("p1", "Linen Shirt", Money.of("30"), [Variant(SIZE_M, BLUE, 4)])
        assert re.match(r"^LINEN-SHIRT-[0-9A-Z]{1,4}$", product.sku)

    def test_keeps_given_sku(self):
        product = Product.create(
            "p1", "Shirt", Money.of("30"), [Variant(SIZE_M, BLUE, 4)], sku=" SHIRT-001 "
        )
        assert product.sku == "SHIRT-001"

    def test_name_required(self):
        with pytest.raises(ValidationError, match="name is required"):
            Product.create("p1", "  ", Money.of("30"), [])

    def test_price_must_be_positive(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            Product.create("p1", "Shirt", Money.of("0"), [])

    def test_duplicate_variant_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate variant"):
            Product.create(
                "p1", "Shirt", Money.of("30"), [Variant(SIZE_M, BLUE, 1), Variant(SIZE_M, BLUE, 2)]
            )

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Product.create("p1", "Shirt", Money.of("30"), [Variant(SIZE_M, BLUE, -1)])

    def test_invalid_discount_rejected(self):
        discount = Discount(enabled=True, type=DiscountType.FIXED, value=Decimal("40"))
        with pytest.raises(ValidationError):
            Product.create("p1", "Shirt", Money.of("30"), [], discount=discount)


class TestProductQueries:

    def test_find_variant(self):
        product = Product.create(
            "p1", "Shirt", Money.of("30"), [Variant(SIZE_M, BLUE, 4), Variant(SIZE_M, RED, 1)]
        )
        assert product.find_variant(SIZE_M, RED).stock == 1
        assert product.find_variant(RED, SIZE_M) is None

    def test_effective_price_uses_active_discount(self):
        product = Product.create(
            "p1",
            "Shirt",
            Money.of("30"),
            [],
            discount=Discount(enabled=True, type=DiscountType.FIXED, value=Decimal("10")),
        )
        assert product.effective_price(NOW) == Money.of("20.00")


class TestSku:

    def test_validate_sku_rejects_short(self):
        with pytest.raises(ValidationError, match="Invalid SKU"):
            validate_sku("AB")

    def test_generate_sku_falls_back_for_symbols(self):
        assert generate_sku("!!!").startswith("PROD-")

    def test_variant_sku(self):
        assert build_variant_sku("Shirt", "M", "Blue") == "SHIR-M-BLU"

    def test_variant_sku_pads_short_names_and_strips_accents(self):
        assert build_variant_sku("Té", "S", "Écru") == "TEXX-S-ECR"

    def test_variant_sku_unknown_color_code(self):
        assert build_variant_sku("Shirt", "M", "123") == "SHIR-M-COL"
