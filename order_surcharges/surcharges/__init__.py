"""
Surcharge decision logic.

- **tax**: Tax rate resolution and price calculation
- **payment**: Cash-on-delivery classification
- **composition**: Cart content checks
- **line_items**: Surcharge and product line item factories
- **reconciler**: The decision function tying the above together
"""

from .composition import count_non_surcharge_items, count_real_items, has_product_items
from .payment import is_cash_on_delivery
from .reconciler import reconcile
from .tax import resolve_tax_rate

__all__ = [
    "count_non_surcharge_items",
    "count_real_items",
    "has_product_items",
    "is_cash_on_delivery",
    "reconcile",
    "resolve_tax_rate",
]
