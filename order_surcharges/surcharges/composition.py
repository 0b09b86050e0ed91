"""
Cart composition checks used to gate surcharges.

Two predicates with different definitions of "real" content:

- has_product_items: at least one product line item. Gates *adding* a
  surcharge.
- count_non_surcharge_items: anything that is not a reserved surcharge id
  (products, promotions, custom items). Gates the cart-wide cleanup that
  removes every surcharge once nothing else is left.
"""

from ..schemas.cart import Cart
from ..schemas.surcharges import RESERVED_LINE_ITEM_IDS

SURCHARGE_LINE_ITEM_IDS = frozenset(RESERVED_LINE_ITEM_IDS.values())


def is_surcharge_id(line_item_id: str) -> bool:
    return line_item_id in SURCHARGE_LINE_ITEM_IDS


def has_product_items(cart: Cart) -> bool:
    return any(item.is_product() for item in cart.line_items)


def count_non_surcharge_items(cart: Cart) -> int:
    return sum(1 for item in cart.line_items if not is_surcharge_id(item.id))


def count_real_items(cart: Cart) -> int:
    """Number of line items that are not derived surcharges."""
    return count_non_surcharge_items(cart)
