from decimal import Decimal

from order_surcharges.schemas import Cart, LineItem, LineItemKind, SurchargeKind
from order_surcharges.surcharges.composition import (
    count_non_surcharge_items,
    count_real_items,
    has_product_items,
    is_surcharge_id,
)
from order_surcharges.surcharges.line_items import build_product_line_item, build_surcharge_line_item


def _cod():
    return build_surcharge_line_item(SurchargeKind.COD_FEE, "COD", Decimal("5"), Decimal("19"))


def _logistic():
    return build_surcharge_line_item(SurchargeKind.LOGISTIC_SURCHARGE, "Logistic", Decimal("2.5"), Decimal("19"))


def test_is_surcharge_id():
    assert is_surcharge_id("cod-fee")
    assert is_surcharge_id("logistic-surcharge")
    assert not is_surcharge_id("sku-1")


def test_empty_cart():
    cart = Cart(token="t")

    assert not has_product_items(cart)
    assert count_non_surcharge_items(cart) == 0
    assert count_real_items(cart) == 0


def test_only_surcharges():
    cart = Cart(token="t", line_items=[_cod(), _logistic()])

    assert not has_product_items(cart)
    assert count_non_surcharge_items(cart) == 0


def test_custom_item_counts_as_real_but_not_product():
    cart = Cart(token="t", line_items=[
        _cod(),
        LineItem(id="gift-wrap", type=LineItemKind.CUSTOM),
    ])

    assert not has_product_items(cart)
    assert count_non_surcharge_items(cart) == 1
    assert count_real_items(cart) == 1


def test_products_and_surcharges():
    cart = Cart(token="t", line_items=[
        build_product_line_item("a", "A", Decimal("1"), Decimal("19")),
        build_product_line_item("b", "B", Decimal("1"), Decimal("19")),
        _cod(),
        _logistic(),
    ])

    assert has_product_items(cart)
    assert count_non_surcharge_items(cart) == 2
