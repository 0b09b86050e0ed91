"""
Tests for the surcharge trigger adapter.
"""
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from order_surcharges.schemas import Cart, PaymentMethod, SalesChannelContext, SurchargeKind, WarningCode
from order_surcharges.services.cart_store import InMemoryCartStore
from order_surcharges.services.interfaces import ConfigProvider
from order_surcharges.services.triggers import SurchargeTriggerAdapter
from order_surcharges.surcharges.line_items import build_product_line_item

COD_ID = "cod-fee"
LOGISTIC_ID = "logistic-surcharge"


def _context(token="cart-1", payment_name="Nachnahme", channel="storefront", locale="en-GB"):
    return SalesChannelContext(
        token=token,
        sales_channel_id=channel,
        locale=locale,
        payment_method=PaymentMethod(name=payment_name),
    )


def _cart_with_product(token="cart-1"):
    return Cart(token=token, line_items=[build_product_line_item("sku-1", "Shirt", Decimal("10.00"), Decimal("19"))])


class CountingCartStore(InMemoryCartStore):
    """InMemoryCartStore counting persist calls."""

    def __init__(self):
        super().__init__()
        self.persist_calls = 0

    def persist(self, cart):
        self.persist_calls += 1
        super().persist(cart)


class StaleOnceCartStore(InMemoryCartStore):
    """Drops the next persist, as a lagging store would."""

    def __init__(self):
        super().__init__()
        self.drop_next = False

    def persist(self, cart):
        if self.drop_next:
            self.drop_next = False
            return
        super().persist(cart)


class TestCartChanged:

    def test_adds_surcharges_and_persists(self, adapter, cart_store):
        cart = _cart_with_product()

        delta = adapter.on_cart_changed(cart, _context())

        assert delta.added == [COD_ID, LOGISTIC_ID]
        stored = cart_store.load("cart-1", _context())
        assert stored.has(COD_ID)
        assert stored.has(LOGISTIC_ID)

    def test_recalculates_cart_totals(self, adapter):
        cart = _cart_with_product()

        adapter.on_cart_changed(cart, _context())

        # 11.90 + 5.95 + 2.98
        assert cart.price.total_price == Decimal("20.83")
        assert cart.price.net_price == Decimal("17.50")

    def test_unchanged_cart_is_not_persisted_again(self, config_provider):
        store = CountingCartStore()
        adapter = SurchargeTriggerAdapter(config_provider, store)
        cart = _cart_with_product()

        adapter.on_cart_changed(cart, _context())
        second = adapter.on_cart_loaded(cart, _context())

        assert not second.has_changes
        assert store.persist_calls == 1

    def test_channel_override_disables_fee(self, adapter, config_provider):
        config_provider.set("OrderSurcharges.config.codFeeActive", False, "storefront-at")
        cart = _cart_with_product()

        adapter.on_cart_changed(cart, _context(channel="storefront-at"))

        assert not cart.has(COD_ID)
        assert cart.has(LOGISTIC_ID)

    def test_unconfigured_channel_reports_warnings(self, empty_config_provider, cart_store):
        adapter = SurchargeTriggerAdapter(empty_config_provider, cart_store)
        cart = _cart_with_product()

        delta = adapter.on_cart_changed(cart, _context())

        assert not delta.has_changes
        assert {w.code for w in delta.warnings} == {WarningCode.CONFIG_MISSING}
        assert [item.id for item in cart.line_items] == ["sku-1"]


class TestLineItemRemoved:

    def test_last_product_removal_cascades(self, adapter, cart_store):
        cart = _cart_with_product()
        adapter.on_cart_changed(cart, _context())

        cart.remove("sku-1")
        delta = adapter.on_line_item_removed(cart, _context(), "sku-1")

        assert sorted(delta.removed) == [COD_ID, LOGISTIC_ID]
        assert cart.line_items == []
        assert cart_store.load("cart-1", _context()).line_items == []

    def test_removing_a_surcharge_restores_it(self, adapter):
        cart = _cart_with_product()
        adapter.on_cart_changed(cart, _context())

        cart.remove(COD_ID)
        delta = adapter.on_line_item_removed(cart, _context(), COD_ID)

        assert delta.added == [COD_ID]
        assert len(cart.find_all(COD_ID)) == 1

    def test_stale_store_is_cleaned_up(self, config_provider):
        store = StaleOnceCartStore()
        adapter = SurchargeTriggerAdapter(config_provider, store)
        cart = _cart_with_product()
        adapter.on_cart_changed(cart, _context())

        cart.remove("sku-1")
        store.drop_next = True
        adapter.on_line_item_removed(cart, _context(), "sku-1")

        stored = store.load("cart-1", _context())
        assert not stored.has(COD_ID)
        assert not stored.has(LOGISTIC_ID)


class TestPaymentMethodChanged:

    def test_switch_to_cod_adds_fee_to_stored_cart(self, adapter, cart_store):
        cart = _cart_with_product()
        adapter.on_cart_changed(cart, _context(payment_name="Bar"))
        assert not cart_store.load("cart-1", _context()).has(COD_ID)

        delta = adapter.on_payment_method_changed(_context(payment_name="Nachnahme"))

        assert delta.added == [COD_ID]
        fee = cart_store.load("cart-1", _context()).get(COD_ID)
        assert fee.price.total_price == Decimal("5.95")

    def test_switch_away_removes_fee(self, adapter, cart_store):
        adapter.on_cart_changed(_cart_with_product(), _context(payment_name="Nachnahme"))

        delta = adapter.on_payment_method_changed(_context(payment_name="PayPal"))

        assert delta.removed == [COD_ID]
        stored = cart_store.load("cart-1", _context())
        assert not stored.has(COD_ID)
        assert stored.has(LOGISTIC_ID)

    def test_unknown_token_is_a_noop(self, adapter):
        delta = adapter.on_payment_method_changed(_context(token="nobody"))

        assert not delta.has_changes


class TestPageRendered:

    def test_checkout_confirm_picks_up_new_amount(self, adapter, config_provider):
        cart = _cart_with_product()
        adapter.on_cart_changed(cart, _context())

        config_provider.set("OrderSurcharges.config.codFeeAmount", 6.0)
        delta = adapter.on_checkout_confirm_rendered(cart, _context())

        assert delta.updated == [COD_ID]
        assert cart.get(COD_ID).price.unit_price == Decimal("7.14")

    def test_cart_page_uses_locale(self, adapter):
        cart = _cart_with_product()

        adapter.on_cart_page_rendered(cart, _context(locale="de-DE"))

        assert cart.get(LOGISTIC_ID).label == "Logistikpauschale"


class StaticConfigProvider(ConfigProvider):
    """Fixed settings, no database access."""

    def get_active(self, kind, sales_channel_id):
        return True

    def get_amount(self, kind, sales_channel_id):
        return {SurchargeKind.COD_FEE: "5.00", SurchargeKind.LOGISTIC_SURCHARGE: "2.50"}[kind]

    def get_default_tax_rate(self, sales_channel_id):
        return "19"

    def get_cod_handler_identifier(self, sales_channel_id):
        return None


def test_independent_carts_in_parallel():
    cart_store = InMemoryCartStore()
    adapter = SurchargeTriggerAdapter(StaticConfigProvider(), cart_store)
    tokens = [f"cart-{i}" for i in range(20)]

    def run(token):
        return adapter.on_cart_changed(_cart_with_product(token), _context(token=token))

    with ThreadPoolExecutor(max_workers=8) as pool:
        deltas = list(pool.map(run, tokens))

    assert all(delta.added == [COD_ID, LOGISTIC_ID] for delta in deltas)
    for token in tokens:
        stored = cart_store.load(token, _context(token=token))
        assert len(stored.find_all(COD_ID)) == 1


def test_token_locks_are_released_after_triggers():
    cart_store = InMemoryCartStore()
    adapter = SurchargeTriggerAdapter(StaticConfigProvider(), cart_store)

    for i in range(200):
        token = f"cart-{i}"
        cart = _cart_with_product(token)
        adapter.on_cart_changed(cart, _context(token=token))
        cart.remove("sku-1")
        adapter.on_line_item_removed(cart, _context(token=token), "sku-1")
        adapter.on_payment_method_changed(_context(token=token, payment_name="PayPal"))

    assert adapter._token_locks == {}


def test_token_lock_released_when_trigger_fails():
    class FailingCartStore(InMemoryCartStore):
        def recalculate(self, cart, context):
            raise RuntimeError("store offline")

    adapter = SurchargeTriggerAdapter(StaticConfigProvider(), FailingCartStore())

    with pytest.raises(RuntimeError):
        adapter.on_cart_changed(_cart_with_product(), _context())

    assert adapter._token_locks == {}
