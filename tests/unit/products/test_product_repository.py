"""Unit tests for the stock operations of ProductDjangoRepository."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return ProductDjangoRepository()


class TestDecrementStock:
    def test_decrements_when_enough(self, repo, make_product):
        product = make_product(quantity=5)

        assert repo.decrement_stock(str(product.id), 3) is True

        product.refresh_from_db()
        assert product.quantity == 2

    def test_exact_quantity_reaches_zero(self, repo, make_product):
        product = make_product(quantity=2)

        assert repo.decrement_stock(str(product.id), 2) is True

        product.refresh_from_db()
        assert product.quantity == 0

    def test_rejects_and_leaves_stock_untouched(self, repo, make_product):
        product = make_product(quantity=1)

        assert repo.decrement_stock(str(product.id), 2) is False

        product.refresh_from_db()
        assert product.quantity == 1

    def test_unknown_product(self, repo):
        assert repo.decrement_stock(str(uuid4()), 1) is False


class TestRestoreStock:
    def test_adds_back(self, repo, make_product):
        product = make_product(quantity=1)

        assert repo.restore_stock(str(product.id), 4) is True

        product.refresh_from_db()
        assert product.quantity == 5


class TestLookups:
    def test_get_many_keys_by_string_id(self, repo, make_product):
        a = make_product(name="A")
        b = make_product(name="B")

        found = repo.get_many([str(a.id), str(b.id), str(uuid4())])

        assert set(found) == {str(a.id), str(b.id)}

    def test_get_many_malformed_ids(self, repo):
        assert repo.get_many(["nope"]) == {}

    def test_get_by_id_malformed(self, repo):
        assert repo.get_by_id("nope") is None
