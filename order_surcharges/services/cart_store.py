"""
In-Memory Cart Store
====================

Reference CartStore used by the trigger adapter when the surrounding shop
does not supply its own. Carts are kept per token in a dict guarded by a
threading.Lock, and are deep-copied on the way in and out so that callers
never share a Cart instance with the store.

Recalculation:
--------------
recalculate() prices every line item that has a price definition but no
calculated price, then sums the cart:

- total_price / position_price: sum of line item gross totals
- calculated_taxes: tax and gross amount summed per tax rate
- net_price: total_price minus all taxes

Thread Safety:
--------------
All dict access happens under _lock. Serializing reconciliation of a single
cart is the trigger adapter's job, not the store's.
"""

import logging
import threading
from decimal import Decimal
from typing import Dict

from ..schemas.cart import Cart, CartPrice, CalculatedTax
from ..schemas.context import SalesChannelContext
from ..surcharges.tax import calculate_price, round_money
from .interfaces import CartStore


logger = logging.getLogger(__name__)


class InMemoryCartStore(CartStore):
    """CartStore keeping carts in process memory."""

    def __init__(self):
        self._carts: Dict[str, Cart] = {}
        self._lock = threading.Lock()

    def load(self, token: str, context: SalesChannelContext) -> Cart:
        with self._lock:
            stored = self._carts.get(token)
            if stored is not None:
                return stored.model_copy(deep=True)

        logger.debug("No cart stored for token %s, starting an empty one", token)
        return Cart(token=token)

    def persist(self, cart: Cart) -> None:
        with self._lock:
            self._carts[cart.token] = cart.model_copy(deep=True)
        logger.debug("Persisted cart %s with %d line items", cart.token, len(cart.line_items))

    def delete(self, token: str) -> None:
        with self._lock:
            self._carts.pop(token, None)

    def recalculate(self, cart: Cart, context: SalesChannelContext) -> None:
        total = Decimal("0")
        taxes_by_rate: Dict[Decimal, CalculatedTax] = {}

        for item in cart.line_items:
            if item.price is None and item.price_definition is not None:
                definition = item.price_definition
                rate = definition.tax_rules[0].tax_rate if definition.tax_rules else Decimal("0")
                item.price = calculate_price(definition.price, rate, item.quantity)
                item.price.tax_rules = list(definition.tax_rules)
            if item.price is None:
                continue

            total += item.price.total_price
            for tax in item.price.calculated_taxes:
                bucket = taxes_by_rate.get(tax.tax_rate)
                if bucket is None:
                    taxes_by_rate[tax.tax_rate] = CalculatedTax(
                        tax=tax.tax,
                        tax_rate=tax.tax_rate,
                        price=tax.price,
                    )
                else:
                    bucket.tax += tax.tax
                    bucket.price += tax.price

        calculated_taxes = [taxes_by_rate[rate] for rate in sorted(taxes_by_rate)]
        tax_total = sum((tax.tax for tax in calculated_taxes), Decimal("0"))

        cart.price = CartPrice(
            net_price=round_money(total - tax_total),
            total_price=round_money(total),
            position_price=round_money(total),
            calculated_taxes=calculated_taxes,
        )
