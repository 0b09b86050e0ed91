"""
Cart Schemas for Order Surcharges
=================================

Pydantic models for the in-memory cart aggregate the reconciler works on.
The cart itself is owned by the surrounding shop; these models only describe
the parts of it the surcharge logic reads and mutates.

Prices:
-------
A line item carries two price views:

- **price_definition**: the net amount and tax rules a price is computed
  from (what the reconciler compares against the configured amount).
- **price**: the calculated gross price with its tax breakdown.

Amounts are ``Decimal`` throughout; rounding to cents happens in
``surcharges.tax.calculate_price``.

Usage:
------
    cart = Cart(token="abc")
    cart.add(build_product_line_item("sku-1", "T-Shirt", Decimal("10.00"), Decimal("19")))
    if cart.has("cod-fee"):
        cart.remove("cod-fee")
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DuplicateLineItemError(ValueError):
    """Raised when adding a line item whose id is already in the cart."""

    def __init__(self, line_item_id: str):
        self.line_item_id = line_item_id
        super().__init__(f"Line item '{line_item_id}' is already in the cart")


class LineItemKind(str, Enum):
    """Type of a cart line item."""
    PRODUCT = "product"
    CUSTOM = "custom"  # derived surcharges
    PROMOTION = "promotion"


class TaxRule(BaseModel):
    """A single tax rate applied to a share of a price."""
    tax_rate: Decimal
    percentage: Decimal = Decimal("100")


class QuantityPriceDefinition(BaseModel):
    """Net unit amount plus the tax rules used to calculate a price."""
    price: Decimal
    tax_rules: List[TaxRule] = Field(default_factory=list)
    quantity: int = 1


class CalculatedTax(BaseModel):
    """Tax amount for one tax rate."""
    tax: Decimal
    tax_rate: Decimal
    price: Decimal  # gross price the tax is contained in


class CalculatedPrice(BaseModel):
    """Calculated gross price of a line item."""
    unit_price: Decimal
    quantity: int = 1
    total_price: Decimal
    calculated_taxes: List[CalculatedTax] = Field(default_factory=list)
    tax_rules: List[TaxRule] = Field(default_factory=list)

    def first_tax_rate(self) -> Optional[Decimal]:
        """Rate of the first tax rule, or None if the price has no rules."""
        if not self.tax_rules:
            return None
        return self.tax_rules[0].tax_rate


class LineItem(BaseModel):
    """
    A cart position.

    Attributes:
        id: Unique key within the cart
        type: product, custom (derived surcharge) or promotion
        label: Display label
        quantity: Number of units; always 1 for derived items
        price_definition: Net amount and tax rules the price derives from
        price: Calculated gross price
        removable: Whether the storefront may offer a remove button
        stackable: Whether quantity may be changed
        good: Whether this is a physical good (False for fees)
        payload: Free-form display hints (icon, hideDeliveryTime, ...)
        extensions: Named markers for downstream UI (cssClass, ...)
    """
    id: str
    type: LineItemKind = LineItemKind.PRODUCT
    label: str = ""
    quantity: int = 1
    price_definition: Optional[QuantityPriceDefinition] = None
    price: Optional[CalculatedPrice] = None
    removable: bool = True
    stackable: bool = True
    good: bool = True
    payload: Dict[str, Any] = Field(default_factory=dict)
    extensions: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def is_product(self) -> bool:
        return self.type == LineItemKind.PRODUCT


class CartPrice(BaseModel):
    """Cart totals as computed by CartStore.recalculate."""
    net_price: Decimal = Decimal("0")
    total_price: Decimal = Decimal("0")
    position_price: Decimal = Decimal("0")
    calculated_taxes: List[CalculatedTax] = Field(default_factory=list)


class Cart(BaseModel):
    """
    Ordered collection of line items keyed by line item id.

    The reconciler mutates carts in place. ``add`` refuses a second item with
    an id already present; carts built directly from a list of items are not
    checked, which is how duplicate surcharges can reach the reconciler.
    """
    token: str
    line_items: List[LineItem] = Field(default_factory=list)
    price: Optional[CartPrice] = None

    def get(self, line_item_id: str) -> Optional[LineItem]:
        """Return the last line item with this id, or None."""
        found = None
        for item in self.line_items:
            if item.id == line_item_id:
                found = item
        return found

    def find_all(self, line_item_id: str) -> List[LineItem]:
        return [item for item in self.line_items if item.id == line_item_id]

    def has(self, line_item_id: str) -> bool:
        return any(item.id == line_item_id for item in self.line_items)

    def add(self, line_item: LineItem) -> None:
        if self.has(line_item.id):
            raise DuplicateLineItemError(line_item.id)
        self.line_items.append(line_item)

    def remove(self, line_item_id: str) -> int:
        """Remove every line item with this id. Returns how many were removed."""
        before = len(self.line_items)
        self.line_items = [item for item in self.line_items if item.id != line_item_id]
        return before - len(self.line_items)
