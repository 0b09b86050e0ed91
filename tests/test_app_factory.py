from decimal import Decimal

from order_surcharges.app_factory import create_trigger_adapter
from order_surcharges.schemas import Cart, PaymentMethod, SalesChannelContext
from order_surcharges.services.cart_store import InMemoryCartStore
from order_surcharges.services.triggers import SurchargeTriggerAdapter
from order_surcharges.surcharges.line_items import build_product_line_item


def test_factory_wires_session_factory(config_provider, session_factory):
    store = InMemoryCartStore()
    adapter = create_trigger_adapter(session_factory=session_factory, cart_store=store, configure_logging=False)
    cart = Cart(token="cart-1", line_items=[build_product_line_item("sku-1", "Shirt", Decimal("10.00"), Decimal("19"))])
    context = SalesChannelContext(
        token="cart-1",
        sales_channel_id="storefront",
        locale="de-DE",
        payment_method=PaymentMethod(name="Vorkasse"),
    )

    delta = adapter.on_cart_changed(cart, context)

    assert isinstance(adapter, SurchargeTriggerAdapter)
    assert delta.added == ["logistic-surcharge"]
    assert store.load("cart-1", context).get("logistic-surcharge").label == "Logistikpauschale"


def test_factory_accepts_config_provider(config_provider):
    adapter = create_trigger_adapter(config_provider=config_provider, configure_logging=False)
    cart = Cart(token="cart-2", line_items=[build_product_line_item("sku-1", "Shirt", Decimal("10.00"), Decimal("19"))])
    context = SalesChannelContext(
        token="cart-2",
        sales_channel_id="storefront",
        payment_method=PaymentMethod(name="Cash on delivery"),
    )

    delta = adapter.on_cart_changed(cart, context)

    assert delta.added == ["cod-fee", "logistic-surcharge"]
