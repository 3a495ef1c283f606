import pytest

from boutique.domain.exceptions import TransactionUnsupportedError
from boutique.domain.model.value_objects import VariantKey
from boutique.infrastructure.persistence.json_product_repository import JsonProductRepository
from boutique.infrastructure.persistence.json_store import JsonFile
from boutique.infrastructure.persistence.json_transaction import JsonTransactionManager
from tests.fakes import BLUE, SHIRT, SIZE_M, make_product

KEY = VariantKey(SHIRT, SIZE_M, BLUE)


def _setup(tmp_path, enabled: bool = True):
    products_file = JsonFile(tmp_path / "products.json")
    other_file = JsonFile(tmp_path / "orders.json")
    repo = JsonProductRepository(products_file)
    repo.save(make_product())
    return repo, other_file, JsonTransactionManager([products_file, other_file], enabled)


class TestJsonTransactionManager:

    def test_commit_keeps_writes(self, tmp_path):
        repo, other_file, tx = _setup(tmp_path)
        with tx.transaction():
            repo.increment_variant_stock(KEY, -4)
            other_file.write([{"id": "x"}])
        assert repo.get_variant_stock(KEY) == 6
        assert other_file.read() == [{"id": "x"}]

    def test_exception_restores_every_file(self, tmp_path):
        repo, other_file, tx = _setup(tmp_path)
        with pytest.raises(RuntimeError):
            with tx.transaction():
                repo.increment_variant_stock(KEY, -4)
                other_file.write([{"id": "x"}])
                raise RuntimeError("order save failed")
        assert repo.get_variant_stock(KEY) == 10
        assert other_file.read() == []

    def test_disabled(self, tmp_path):
        repo, _, tx = _setup(tmp_path, enabled=False)
        assert tx.supports_transactions is False
        with pytest.raises(TransactionUnsupportedError):
            with tx.transaction():
                repo.increment_variant_stock(KEY, -4)
        assert repo.get_variant_stock(KEY) == 10
