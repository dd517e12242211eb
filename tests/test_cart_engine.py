"""Tests for line item identity, merging, quantity rules and totals."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from storefront.cart_engine import (
    MAX_LINE_QUANTITY,
    Cart,
    CartEngine,
    CartLineItem,
    cart_item_count,
    cart_total,
)
from storefront.errors import InvalidRequestError, NotFoundError


class StubCatalog:
    def __init__(self, *products):
        self.products = {p.product_id: p for p in products}
        self.lookups = []

    def find_product_by_id(self, product_id):
        self.lookups.append(product_id)
        return self.products.get(product_id)


def _product(product_id, price, name="Linen Shirt", images=("/img/a.jpg", "/img/b.jpg")):
    return SimpleNamespace(product_id=product_id, name=name, price=Decimal(price), images=list(images))


@pytest.fixture()
def catalog():
    return StubCatalog(_product("P1", "500"), _product("P2", "250", name="Oxford Shirt"), _product("P3", "99.99", images=()))


@pytest.fixture()
def engine(catalog):
    return CartEngine(catalog)


def _line(product_id="P1", price="500", size="M", color="red", quantity=1):
    return CartLineItem(product_id=product_id, name="x", price=Decimal(price), size=size, color=color, quantity=quantity)


class TestAdd:
    def test_new_line_uses_catalog_name_price_and_first_image(self, engine):
        cart = engine.add(Cart(), "P1", "M", "red", 2)
        assert len(cart.items) == 1
        item = cart.items[0]
        assert item.name == "Linen Shirt"
        assert item.price == Decimal("500")
        assert item.image == "/img/a.jpg"
        assert (item.size, item.color, item.quantity) == ("M", "red", 2)

    def test_product_without_images_has_no_image(self, engine):
        cart = engine.add(Cart(), "P3", "S", "blue")
        assert cart.items[0].image is None

    def test_default_quantity_is_one(self, engine):
        cart = engine.add(Cart(), "P1", "M", "red")
        assert cart.items[0].quantity == 1

    def test_same_key_merges_quantities(self, engine):
        cart = Cart()
        engine.add(cart, "P1", "M", "red", 2)
        engine.add(cart, "P1", "M", "red", 3)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_different_size_or_color_is_a_separate_line(self, engine):
        cart = Cart()
        engine.add(cart, "P1", "M", "red")
        engine.add(cart, "P1", "L", "red")
        engine.add(cart, "P1", "M", "blue")
        assert [(i.size, i.color) for i in cart.items] == [("M", "red"), ("L", "red"), ("M", "blue")]

    def test_merge_has_no_upper_cap_by_default(self, engine):
        cart = Cart()
        engine.add(cart, "P1", "M", "red", 4)
        engine.add(cart, "P1", "M", "red", 4)
        assert cart.items[0].quantity == 8

    def test_clamp_on_add_caps_merged_quantity(self, catalog):
        engine = CartEngine(catalog, clamp_on_add=True)
        cart = Cart()
        engine.add(cart, "P1", "M", "red", 4)
        engine.add(cart, "P1", "M", "red", 4)
        assert cart.items[0].quantity == MAX_LINE_QUANTITY

    def test_clamp_on_add_caps_new_line(self, catalog):
        engine = CartEngine(catalog, clamp_on_add=True)
        cart = engine.add(Cart(), "P1", "M", "red", 9)
        assert cart.items[0].quantity == MAX_LINE_QUANTITY

    def test_unknown_product_raises_not_found_and_leaves_cart(self, engine):
        cart = engine.add(Cart(), "P1", "M", "red")
        with pytest.raises(NotFoundError):
            engine.add(cart, "NOPE", "M", "red")
        assert len(cart.items) == 1

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_is_rejected(self, engine, catalog, quantity):
        cart = Cart()
        with pytest.raises(InvalidRequestError):
            engine.add(cart, "P1", "M", "red", quantity)
        assert cart.items == []
        assert catalog.lookups == []

    def test_add_reads_catalog_once(self, engine, catalog):
        engine.add(Cart(), "P1", "M", "red")
        assert catalog.lookups == ["P1"]


class TestUpdateQuantity:
    def test_replaces_quantity(self, engine):
        cart = Cart(items=[_line(quantity=1)])
        engine.update_quantity(cart, 0, 4)
        assert cart.items[0].quantity == 4
        assert cart.item_count == 4

    @pytest.mark.parametrize("quantity", [0, 6, -3])
    def test_out_of_range_quantity_leaves_cart_unchanged(self, engine, quantity):
        cart = Cart(items=[_line(quantity=2)])
        before = cart.model_copy(deep=True)
        with pytest.raises(InvalidRequestError):
            engine.update_quantity(cart, 0, quantity)
        assert cart == before

    @pytest.mark.parametrize("index", [-1, 1, 7])
    def test_invalid_index_is_invalid_request(self, engine, index):
        cart = Cart(items=[_line(quantity=2)])
        with pytest.raises(InvalidRequestError):
            engine.update_quantity(cart, index, 3)
        assert cart.items[0].quantity == 2


class TestRemove:
    def test_removes_position_and_preserves_order(self, engine):
        cart = Cart(items=[_line("P1"), _line("P2", "250"), _line("P3", "99.99")])
        removed = engine.remove(cart, 1)
        assert removed.product_id == "P2"
        assert [i.product_id for i in cart.items] == ["P1", "P3"]

    @pytest.mark.parametrize("index", [-1, 3])
    def test_invalid_index_is_not_found(self, engine, index):
        cart = Cart(items=[_line("P1"), _line("P2", "250"), _line("P3", "99.99")])
        with pytest.raises(NotFoundError):
            engine.remove(cart, index)
        assert len(cart.items) == 3

    def test_remove_from_empty_cart(self, engine):
        with pytest.raises(NotFoundError):
            engine.remove(Cart(), 0)


class TestTotals:
    def test_total_is_sum_of_price_times_quantity(self):
        items = [_line("P1", "500", quantity=2), _line("P3", "99.99", quantity=3)]
        assert cart_total(items) == Decimal("1299.97")
        assert cart_item_count(items) == 5

    def test_empty_cart_totals_are_zero(self):
        assert Cart().total == Decimal("0")
        assert Cart().item_count == 0

    def test_total_follows_every_mutation(self, engine):
        cart = Cart()
        engine.add(cart, "P1", "M", "red", 1)
        engine.add(cart, "P2", "S", "blue", 2)
        assert engine.total(cart) == Decimal("1000")
        engine.update_quantity(cart, 0, 3)
        assert engine.total(cart) == Decimal("2000")
        engine.remove(cart, 1)
        assert engine.total(cart) == Decimal("1500")
        assert engine.item_count(cart) == 3


class TestScenario:
    def test_add_merge_reject_remove_sequence(self, engine):
        cart = Cart()

        engine.add(cart, "P1", "M", "red", 2)
        assert [(i.product_id, i.size, i.color, i.quantity, i.price) for i in cart.items] == [
            ("P1", "M", "red", 2, Decimal("500"))
        ]
        assert cart.total == Decimal("1000")

        engine.add(cart, "P1", "M", "red", 1)
        assert cart.items[0].quantity == 3
        assert cart.total == Decimal("1500")

        with pytest.raises(InvalidRequestError):
            engine.update_quantity(cart, 0, 6)
        assert cart.items[0].quantity == 3

        engine.remove(cart, 0)
        assert cart.items == []
        assert cart.total == Decimal("0")
