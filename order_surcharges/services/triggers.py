"""
Surcharge Trigger Adapter
=========================

Entry points the shop calls whenever surcharges may need to change. Every
entry point runs the same reconciliation; they only differ in where the cart
comes from and what gets logged.

Triggers:
---------
- on_cart_loaded: cart was read from storage
- on_cart_changed: line items were added or quantities changed
- on_line_item_removed: a line item was removed
- on_payment_method_changed: customer switched payment method (loads the
  cart by context token)
- on_checkout_confirm_rendered: checkout confirmation page is being built
- on_cart_page_rendered: cart page is being built

Flow per Trigger:
-----------------
1. Acquire the lock for the cart token
2. Load both surcharge configs for the context's sales channel
3. reconcile() the cart in place
4. If the delta has changes: recalculate and persist the cart
5. If anything was removed: reload the cart and remove any surcharge the
   store still returns (read-after-write check)

Concurrency:
------------
Carts are not internally synchronized, so reconciliation of one token is
serialized with a per-token lock. Different tokens never block each other.
A token's lock only exists while some trigger for that cart is running.
"""

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, List, Optional

from ..schemas.cart import Cart
from ..schemas.context import SalesChannelContext
from ..schemas.surcharges import CartDelta
from ..surcharges.reconciler import reconcile
from .interfaces import CartStore, ConfigProvider, LabelProvider
from .settings import load_surcharge_configs


logger = logging.getLogger(__name__)


class Trigger(str, Enum):
    CART_LOADED = "cart_loaded"
    CART_CHANGED = "cart_changed"
    LINE_ITEM_REMOVED = "line_item_removed"
    PAYMENT_METHOD_CHANGED = "payment_method_changed"
    CHECKOUT_CONFIRM_RENDERED = "checkout_confirm_rendered"
    CART_PAGE_RENDERED = "cart_page_rendered"


class SurchargeTriggerAdapter:
    """
    Runs reconciliation for shop events and stores the result.

    Args:
        config_provider: Source of per-channel surcharge settings
        cart_store: Where carts are loaded from and persisted to
        labels: Label provider passed through to the reconciler
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        cart_store: CartStore,
        labels: Optional[LabelProvider] = None,
    ):
        self._config_provider = config_provider
        self._cart_store = cart_store
        self._labels = labels
        # token -> [lock, number of callers holding or waiting for it]
        self._token_locks: Dict[str, List] = {}
        self._registry_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Trigger entry points
    # -------------------------------------------------------------------------

    def on_cart_loaded(self, cart: Cart, context: SalesChannelContext) -> CartDelta:
        return self._run(Trigger.CART_LOADED, cart, context)

    def on_cart_changed(self, cart: Cart, context: SalesChannelContext) -> CartDelta:
        return self._run(Trigger.CART_CHANGED, cart, context)

    def on_line_item_removed(
        self,
        cart: Cart,
        context: SalesChannelContext,
        line_item_id: str,
    ) -> CartDelta:
        logger.debug("Line item %s removed from cart %s", line_item_id, cart.token)
        return self._run(Trigger.LINE_ITEM_REMOVED, cart, context)

    def on_payment_method_changed(self, context: SalesChannelContext) -> CartDelta:
        """Reconcile the context's cart after a payment method switch."""
        with self._locked(context.token):
            cart = self._cart_store.load(context.token, context)
            return self._run(Trigger.PAYMENT_METHOD_CHANGED, cart, context)

    def on_checkout_confirm_rendered(self, cart: Cart, context: SalesChannelContext) -> CartDelta:
        return self._run(Trigger.CHECKOUT_CONFIRM_RENDERED, cart, context)

    def on_cart_page_rendered(self, cart: Cart, context: SalesChannelContext) -> CartDelta:
        return self._run(Trigger.CART_PAGE_RENDERED, cart, context)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @contextmanager
    def _locked(self, token: str) -> Iterator[None]:
        """Hold the lock for one cart token. The lock is dropped with its last user."""
        with self._registry_lock:
            entry = self._token_locks.get(token)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._token_locks[token] = entry
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._registry_lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._token_locks[token]

    def _run(self, trigger: Trigger, cart: Cart, context: SalesChannelContext) -> CartDelta:
        with self._locked(cart.token):
            cod_config, logistic_config, warnings = load_surcharge_configs(
                self._config_provider,
                context.sales_channel_id,
            )

            delta = reconcile(cart, context, cod_config, logistic_config, labels=self._labels)
            delta.warnings[:0] = warnings

            if not delta.has_changes:
                logger.debug("%s: cart %s already reconciled", trigger.value, cart.token)
                return delta

            logger.info(
                "%s: cart %s changed (added=%s updated=%s removed=%s)",
                trigger.value,
                cart.token,
                delta.added,
                delta.updated,
                delta.removed,
            )
            self._cart_store.recalculate(cart, context)
            self._cart_store.persist(cart)

            if delta.removed:
                self._confirm_removed(cart.token, context, delta)

            return delta

    def _confirm_removed(self, token: str, context: SalesChannelContext, delta: CartDelta) -> None:
        """Remove surcharges a stale store still returns after a removal."""
        stored = self._cart_store.load(token, context)
        lingering = [line_item_id for line_item_id in delta.removed if stored.has(line_item_id)]
        if not lingering:
            return

        logger.warning("Cart %s still held %s after persisting, removing again", token, lingering)
        for line_item_id in lingering:
            stored.remove(line_item_id)
        self._cart_store.recalculate(stored, context)
        self._cart_store.persist(stored)
