"""
Line item factories for derived surcharges and products.

Derived surcharge items are never physical goods, never stackable, and are
not removable from the storefront; only the reconciler removes them. Their
payload and extensions carry the markers the storefront templates key on.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..schemas.cart import LineItem, LineItemKind, QuantityPriceDefinition, TaxRule
from ..schemas.surcharges import SurchargeKind
from .tax import calculate_price


@dataclass(frozen=True)
class SurchargeMarkers:
    """Display markers attached to a surcharge line item."""
    icon: str
    flag: str  # payload/customFields flag, e.g. "isCodFee"
    extension: str  # extension name, e.g. "codFee"


SURCHARGE_MARKERS = {
    SurchargeKind.COD_FEE: SurchargeMarkers(
        icon="icon-money",
        flag="isCodFee",
        extension="codFee",
    ),
    SurchargeKind.LOGISTIC_SURCHARGE: SurchargeMarkers(
        icon="icon-shipping-box",
        flag="isLogisticSurcharge",
        extension="logisticSurcharge",
    ),
}


def apply_surcharge_price(item: LineItem, amount: Decimal, tax_rate: Decimal, label: str) -> None:
    """Set label, price definition and calculated price in place."""
    item.label = label
    item.price_definition = QuantityPriceDefinition(
        price=amount,
        tax_rules=[TaxRule(tax_rate=tax_rate)],
        quantity=1,
    )
    item.price = calculate_price(amount, tax_rate, quantity=1)


def build_surcharge_line_item(
    kind: SurchargeKind,
    label: str,
    amount: Decimal,
    tax_rate: Decimal,
) -> LineItem:
    """Create the single line item representing a surcharge kind."""
    markers = SURCHARGE_MARKERS[kind]
    line_item_id = kind.line_item_id

    item = LineItem(
        id=line_item_id,
        type=LineItemKind.CUSTOM,
        quantity=1,
        removable=False,
        stackable=False,
        good=False,
        payload={
            "customFields": {"icon": markers.icon, markers.flag: True},
            markers.flag: True,
            "hideDeliveryTime": True,
        },
        extensions={
            markers.extension: {},
            "cssClass": {"value": f"cart-item-{line_item_id}"},
        },
    )
    apply_surcharge_price(item, amount, tax_rate, label)
    return item


def build_product_line_item(
    line_item_id: str,
    label: str,
    unit_price: Decimal,
    tax_rate: Optional[Decimal],
    quantity: int = 1,
) -> LineItem:
    """
    Create a priced product line item.

    unit_price is net. Passing tax_rate=None yields a product without tax
    rules, which the tax resolver skips.
    """
    tax_rules = [TaxRule(tax_rate=tax_rate)] if tax_rate is not None else []
    price = calculate_price(unit_price, tax_rate or Decimal("0"), quantity)
    price.tax_rules = tax_rules
    if tax_rate is None:
        price.calculated_taxes = []

    return LineItem(
        id=line_item_id,
        type=LineItemKind.PRODUCT,
        label=label,
        quantity=quantity,
        price_definition=QuantityPriceDefinition(
            price=unit_price,
            tax_rules=tax_rules,
            quantity=quantity,
        ),
        price=price,
    )
