"""Size-indexed stock reduction and restoration."""

import pytest

from app.models.product import Product
from app.services import stock as stock_service
from app.services.exceptions import InvalidQuantity, ProductNotFound


def ledger(**sizes):
    return [{"size": size, "stock": count} for size, count in sizes.items()]


class TestPureHelpers:
    def test_total_stock(self):
        assert stock_service.total_stock(ledger(S=1, M=3, L=2)) == 6
        assert stock_service.total_stock(None) == 0

    def test_decrement_floors_at_zero(self):
        entries, matched = stock_service.decrement_size(ledger(M=3, L=2), "M", 50)
        assert matched
        assert entries == ledger(M=0, L=2)

    def test_decrement_does_not_mutate_input(self):
        original = ledger(M=3)
        stock_service.decrement_size(original, "M", 1)
        assert original == ledger(M=3)

    def test_unknown_size_leaves_entries_unchanged(self):
        entries, matched = stock_service.decrement_size(ledger(M=3, L=2), "XXL", 1)
        assert not matched
        assert entries == ledger(M=3, L=2)

    def test_size_lookup_is_case_insensitive(self):
        entries, matched = stock_service.decrement_size(ledger(XL=4), "xl", 1)
        assert matched
        assert entries == ledger(XL=3)


class TestApplySizeStocks:
    def test_aggregate_is_derived(self):
        product = Product(name="Tee", price=10, stock=999)
        stock_service.apply_size_stocks(product, [{"size": "s", "stock": 2}, {"size": "M", "stock": 5}])
        assert product.size_stocks == ledger(S=2, M=5)
        assert product.stock == 7

    def test_duplicate_size_rejected(self):
        product = Product(name="Tee", price=10)
        with pytest.raises(InvalidQuantity):
            stock_service.apply_size_stocks(product, ledger(M=1) + [{"size": "m", "stock": 2}])

    def test_negative_stock_rejected(self):
        product = Product(name="Tee", price=10)
        with pytest.raises(InvalidQuantity):
            stock_service.apply_size_stocks(product, ledger(M=-1))

    def test_none_leaves_product_alone(self):
        product = Product(name="Tee", price=10, stock=4)
        stock_service.apply_size_stocks(product, None)
        assert product.stock == 4
        assert product.size_stocks is None


class TestReduceStock:
    def test_reduces_size_and_recomputes_aggregate(self, db, make_product, get_product):
        pid = make_product(size_stocks=ledger(M=3, L=2))
        stock_service.reduce_stock(db, pid, "M", 5)
        db.commit()
        product = get_product(pid)
        assert product.size_stocks == ledger(M=0, L=2)
        assert product.stock == 2

    def test_aggregate_matches_ledger_after_any_sequence(self, db, make_product, get_product):
        pid = make_product(size_stocks=ledger(S=4, M=7, L=1))
        for size, quantity in [("S", 1), ("M", 3), ("L", 5), ("XL", 2), ("M", 10), ("S", 1)]:
            stock_service.reduce_stock(db, pid, size, quantity)
        db.commit()
        product = get_product(pid)
        assert product.stock == stock_service.total_stock(product.size_stocks)
        assert product.size_stocks == ledger(S=2, M=0, L=0)
        assert all(e["stock"] >= 0 for e in product.size_stocks)

    def test_unknown_size_changes_nothing(self, db, make_product, get_product):
        pid = make_product(size_stocks=ledger(M=3, L=2))
        stock_service.reduce_stock(db, pid, "XS", 1)
        db.commit()
        product = get_product(pid)
        assert product.size_stocks == ledger(M=3, L=2)
        assert product.stock == 5

    def test_product_without_ledger_decrements_aggregate(self, db, make_product, get_product):
        pid = make_product(stock=4)
        stock_service.reduce_stock(db, pid, "ONE SIZE", 3)
        stock_service.reduce_stock(db, pid, "ONE SIZE", 3)
        db.commit()
        assert get_product(pid).stock == 0

    def test_missing_product_raises(self, db):
        with pytest.raises(ProductNotFound):
            stock_service.reduce_stock(db, 404, "M", 1)

    def test_non_positive_quantity_rejected(self, db, make_product):
        pid = make_product(size_stocks=ledger(M=3))
        with pytest.raises(InvalidQuantity):
            stock_service.reduce_stock(db, pid, "M", 0)


class TestRestoreStock:
    def test_restores_size_and_aggregate(self, db, make_product, get_product):
        pid = make_product(size_stocks=ledger(M=0, L=2))
        stock_service.restore_stock(db, pid, "M", 3)
        db.commit()
        product = get_product(pid)
        assert product.size_stocks == ledger(M=3, L=2)
        assert product.stock == 5

    def test_without_ledger(self, db, make_product, get_product):
        pid = make_product(stock=1)
        stock_service.restore_stock(db, pid, "M", 2)
        db.commit()
        assert get_product(pid).stock == 3
