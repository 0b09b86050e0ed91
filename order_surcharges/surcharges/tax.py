"""
Tax calculation utilities for derived surcharges.

Surcharges carry a single tax rate. The rate is resolved fresh on every
reconciliation so that it follows the cart's current first product rather
than whatever the cart held when the surcharge was created.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

from ..config import FALLBACK_TAX_RATE
from ..schemas.cart import Cart, CalculatedPrice, CalculatedTax, TaxRule
from ..schemas.context import SalesChannelContext
from ..schemas.surcharges import SurchargeConfig

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    """Round to 2 decimal places for currency."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


class TaxRateSource(str, Enum):
    """Where a resolved tax rate came from."""
    CONTEXT = "context"
    PRODUCT = "product"
    CHANNEL_DEFAULT = "channel_default"
    FALLBACK = "fallback"


@dataclass
class TaxResolution:
    rate: Decimal
    source: TaxRateSource

    @property
    def resolved(self) -> bool:
        """True when the rate came from the context or a product."""
        return self.source in (TaxRateSource.CONTEXT, TaxRateSource.PRODUCT)


def resolve_tax_rate_with_source(
    cart: Cart,
    context: Optional[SalesChannelContext],
    config: Optional[SurchargeConfig],
) -> TaxResolution:
    """
    Resolve the surcharge tax rate and report which rule produced it.

    Priority:
        1. First tax rule exposed by the context
        2. First tax rule of the first priced product item in the cart
        3. The channel's configured default rate
        4. FALLBACK_TAX_RATE

    Never raises.
    """
    if context is not None and context.tax_rules:
        return TaxResolution(context.tax_rules[0].tax_rate, TaxRateSource.CONTEXT)

    for item in cart.line_items:
        if not item.is_product() or item.price is None:
            continue
        rate = item.price.first_tax_rate()
        if rate is not None:
            return TaxResolution(rate, TaxRateSource.PRODUCT)

    if config is not None and config.default_tax_rate is not None:
        return TaxResolution(config.default_tax_rate, TaxRateSource.CHANNEL_DEFAULT)

    logger.debug("No tax rate configured, using fallback %s", FALLBACK_TAX_RATE)
    return TaxResolution(FALLBACK_TAX_RATE, TaxRateSource.FALLBACK)


def resolve_tax_rate(
    cart: Cart,
    context: Optional[SalesChannelContext],
    config: Optional[SurchargeConfig],
) -> Decimal:
    """Tax rate percent to apply to a derived surcharge."""
    return resolve_tax_rate_with_source(cart, context, config).rate


def calculate_price(amount: Decimal, tax_rate: Decimal, quantity: int = 1) -> CalculatedPrice:
    """
    Calculate a gross price from a net unit amount and one tax rate.

    Args:
        amount: Net unit amount
        tax_rate: Tax rate in percent (19 = 19%)
        quantity: Number of units

    Returns:
        CalculatedPrice with unit/total gross prices and a single tax entry
    """
    unit_price = round_money(amount * (1 + tax_rate / 100))
    total_price = round_money(unit_price * quantity)
    net_total = round_money(amount * quantity)

    return CalculatedPrice(
        unit_price=unit_price,
        quantity=quantity,
        total_price=total_price,
        calculated_taxes=[
            CalculatedTax(tax=total_price - net_total, tax_rate=tax_rate, price=total_price),
        ],
        tax_rules=[TaxRule(tax_rate=tax_rate)],
    )
