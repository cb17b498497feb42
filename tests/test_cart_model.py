import json

import pytest

from storefront.core.errors import NotFound
from storefront.models.cart import Cart, CartLine


def test_add_merges_lines_by_product():
    cart = Cart(user_id="u1")
    cart.add("p1", 2)
    cart.add("p2", 1)
    cart.add("p1", 3)
    assert [(it.product_id, it.quantity) for it in cart.items] == [("p1", 5), ("p2", 1)]


def test_set_quantity_zero_removes_line():
    cart = Cart(user_id="u1", items=[CartLine("p1", 2), CartLine("p2", 1)])
    cart.set_quantity("p1", 0)
    assert [it.product_id for it in cart.items] == ["p2"]


def test_set_quantity_on_missing_line_raises():
    cart = Cart(user_id="u1", items=[CartLine("p1", 2)])
    with pytest.raises(NotFound) as exc:
        cart.set_quantity("nope", 3)
    assert exc.value.message == "Item not found in cart"


def test_decrement_drops_line_at_zero():
    cart = Cart(user_id="u1", items=[CartLine("p1", 2)])
    cart.decrement("p1")
    assert cart.find("p1").quantity == 1
    cart.decrement("p1")
    assert cart.is_empty()


def test_remove_reports_whether_anything_changed():
    cart = Cart(user_id="u1", items=[CartLine("p1", 1)])
    assert cart.remove("other") is False
    assert cart.remove("p1") is True
    assert cart.is_empty()


def test_from_dict_parses_json_items_and_skips_dead_lines():
    row = {
        "id": "c1",
        "user_id": "u1",
        "items": json.dumps([
            {"product_id": "p1", "quantity": "2"},
            {"product_id": "p2", "quantity": 0},
            {"productId": "p3", "quantity": 1},
        ]),
        "updated_at": "",
        "version": "4",
    }
    cart = Cart.from_dict(row)
    assert [(it.product_id, it.quantity) for it in cart.items] == [("p1", 2), ("p3", 1)]
    assert cart.version == 4
    assert cart.updated_at is None


def test_from_dict_tolerates_garbage_items():
    cart = Cart.from_dict({"user_id": "u1", "items": "not json"})
    assert cart.items == []


def test_to_dict_serializes_items():
    cart = Cart(user_id="u1", items=[CartLine("p1", 3)], version=2)
    d = cart.to_dict()
    assert d["user_id"] == "u1"
    assert json.loads(d["items"]) == [{"product_id": "p1", "quantity": 3}]
    assert d["version"] == 2
