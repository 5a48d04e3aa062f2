"""Cart consolidation over in-memory carts."""

import pytest

from app.models.cart import Cart
from app.schemas.cart import CartItemIn
from app.services import cart as cart_service
from app.services.exceptions import InvalidQuantity, ItemNotFound


def item(product_id=1, size="M", quantity=1, price=100.0, stock=5, **extra):
    return CartItemIn(
        productId=product_id,
        name=extra.pop("name", f"Product {product_id}"),
        price=price,
        quantity=quantity,
        size=size,
        image="/media/p.jpg",
        stock=stock,
        **extra,
    )


@pytest.fixture
def cart():
    return Cart(user_id=1)


class TestAddItem:
    def test_first_add_creates_line(self, cart):
        cart_service.add_item(cart, item(quantity=2))
        assert cart_service.get_total(cart) == 200
        assert cart_service.get_item_count(cart) == 2
        assert len(cart.items) == 1

    def test_same_key_merges_and_clamps_to_stock(self, cart):
        cart_service.add_item(cart, item(quantity=2, stock=5))
        cart_service.add_item(cart, item(quantity=4, stock=5))
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
        assert cart_service.get_total(cart) == 500

    def test_merge_below_ceiling_sums(self, cart):
        cart_service.add_item(cart, item(quantity=1, stock=10))
        cart_service.add_item(cart, item(quantity=2, stock=10))
        cart_service.add_item(cart, item(quantity=3, stock=10))
        assert cart.items[0].quantity == 6

    def test_latest_stock_value_is_the_ceiling(self, cart):
        cart_service.add_item(cart, item(quantity=4, stock=10))
        cart_service.add_item(cart, item(quantity=4, stock=5))
        assert cart.items[0].quantity == 5
        assert cart.items[0].stock == 5

    def test_larger_latest_stock_raises_the_ceiling(self, cart):
        cart_service.add_item(cart, item(quantity=3, stock=3))
        cart_service.add_item(cart, item(quantity=3, stock=10))
        assert cart.items[0].quantity == 6

    def test_different_size_is_a_separate_line(self, cart):
        cart_service.add_item(cart, item(size="M"))
        cart_service.add_item(cart, item(size="L"))
        assert len(cart.items) == 2

    def test_variant_is_part_of_the_key(self, cart):
        cart_service.add_item(cart, item(variantId="red"))
        cart_service.add_item(cart, item(variantId="blue"))
        cart_service.add_item(cart, item())
        cart_service.add_item(cart, item(variantId="red"))
        assert len(cart.items) == 3
        red = cart_service.find_item(cart, 1, "M", "red")
        assert red.quantity == 2

    def test_size_matching_ignores_case_and_whitespace(self, cart):
        cart_service.add_item(cart, item(size="m"))
        cart_service.add_item(cart, item(size=" M "))
        assert len(cart.items) == 1
        assert cart.items[0].size == "M"
        assert cart.items[0].quantity == 2

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_is_rejected(self, cart, quantity):
        with pytest.raises(InvalidQuantity):
            cart_service.add_item(cart, item(quantity=quantity))
        assert cart.items == []

    def test_quantity_above_stock_is_rejected(self, cart):
        with pytest.raises(InvalidQuantity):
            cart_service.add_item(cart, item(quantity=6, stock=5))
        assert cart.items == []


class TestUpdateQuantity:
    def test_sets_quantity_without_clamping(self, cart):
        cart_service.add_item(cart, item(quantity=1, stock=2))
        cart_service.update_quantity(cart, 1, "M", 9)
        assert cart.items[0].quantity == 9

    def test_zero_removes_line(self, cart):
        cart_service.add_item(cart, item())
        assert cart_service.update_quantity(cart, 1, "M", 0) is None
        assert cart.items == []

    def test_negative_on_missing_line_is_a_no_op(self, cart):
        cart_service.update_quantity(cart, 1, "M", -3)
        assert cart.items == []

    def test_missing_line_raises(self, cart):
        cart_service.add_item(cart, item(size="M"))
        with pytest.raises(ItemNotFound):
            cart_service.update_quantity(cart, 1, "L", 2)

    def test_variant_must_match(self, cart):
        cart_service.add_item(cart, item(variantId="red"))
        with pytest.raises(ItemNotFound):
            cart_service.update_quantity(cart, 1, "M", 2)


class TestRemoveItem:
    def test_removes_matching_line_only(self, cart):
        cart_service.add_item(cart, item(product_id=1))
        cart_service.add_item(cart, item(product_id=2, price=50.0))
        cart_service.remove_item(cart, 1, "M")
        assert [i.product_id for i in cart.items] == [2]

    def test_missing_key_is_a_no_op(self, cart):
        cart_service.add_item(cart, item(quantity=2))
        cart_service.remove_item(cart, 99, "XL")
        assert cart_service.get_total(cart) == 200
        assert cart_service.get_item_count(cart) == 2

    def test_empty_variant_means_no_variant(self, cart):
        cart_service.add_item(cart, item())
        cart_service.remove_item(cart, 1, "M", "")
        assert cart.items == []

    def test_clear_empties_cart(self, cart):
        cart_service.add_item(cart, item(product_id=1))
        cart_service.add_item(cart, item(product_id=2))
        cart_service.clear(cart)
        assert cart_service.get_total(cart) == 0
        assert cart_service.get_item_count(cart) == 0


class TestTotals:
    def test_offer_price_wins_over_price(self, cart):
        cart_service.add_item(cart, item(product_id=1, price=100.0, offerPrice=80.0, quantity=2))
        cart_service.add_item(cart, item(product_id=2, price=50.0, quantity=3))
        assert cart_service.get_total(cart) == pytest.approx(310.0)
        assert cart_service.get_item_count(cart) == 5

    def test_zero_offer_price_is_honoured(self, cart):
        cart_service.add_item(cart, item(price=100.0, offerPrice=0.0, quantity=2))
        assert cart_service.get_total(cart) == 0

    def test_total_is_order_independent(self):
        first, second = Cart(user_id=1), Cart(user_id=2)
        for c, sizes in ((first, ["S", "M", "L"]), (second, ["L", "S", "M"])):
            for size in sizes:
                cart_service.add_item(c, item(size=size, price=19.99, quantity=2, stock=9))
        cart_service.update_quantity(first, 1, "S", 3)
        cart_service.remove_item(second, 1, "S")
        cart_service.add_item(second, item(size="S", price=19.99, quantity=3, stock=9))
        assert cart_service.get_total(first) == pytest.approx(cart_service.get_total(second))
        assert cart_service.get_item_count(first) == cart_service.get_item_count(second) == 7

    def test_empty_cart(self, cart):
        assert cart_service.get_total(cart) == 0
        assert cart_service.get_item_count(cart) == 0
