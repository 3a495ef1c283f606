"""Unit tests for the Cart aggregate."""

import pytest

from boutique.domain.exceptions import VersionConflictError
from boutique.domain.model.cart import Cart, clamp_quantity
from boutique.domain.model.value_objects import VariantKey
from tests.fakes import BLUE, RED, SHIRT, SIZE_M, USER

KEY = VariantKey(SHIRT, SIZE_M, BLUE)


@pytest.mark.parametrize("raw, expected", [(0, 1), (-3, 1), (5, 5), (150, 99)])
def test_clamp_quantity(raw, expected):
    assert clamp_quantity(raw) == expected


class TestCart:

    def test_upsert_new_line_is_capped(self):
        cart = Cart(USER)
        cart.upsert_item(KEY, 8, limit=5)
        assert cart.find(KEY).quantity == 5
        assert cart.version == 2

    def test_upsert_existing_line_adds(self):
        cart = Cart(USER)
        cart.upsert_item(KEY, 2, limit=10)
        cart.upsert_item(KEY, 3, limit=10)
        assert len(cart.items) == 1
        assert cart.find(KEY).quantity == 5
        assert cart.version == 3

    def test_upsert_existing_line_respects_limit(self):
        cart = Cart(USER)
        cart.upsert_item(KEY, 4, limit=6)
        cart.upsert_item(KEY, 4, limit=6)
        assert cart.find(KEY).quantity == 6

    def test_update_missing_line(self):
        cart = Cart(USER)
        assert cart.update_quantity(KEY, 2) is False
        assert cart.version == 1

    def test_remove(self):
        cart = Cart(USER)
        cart.upsert_item(KEY, 1, limit=5)
        assert cart.remove_item(KEY) is True
        assert cart.remove_item(VariantKey(SHIRT, SIZE_M, RED)) is False
        assert cart.items == []

    def test_version_check(self):
        cart = Cart(USER, version=4)
        cart.check_version(None)
        cart.check_version(4)
        with pytest.raises(VersionConflictError) as exc_info:
            cart.check_version(3)
        assert exc_info.value.current == 4
        assert exc_info.value.status_code == 412
