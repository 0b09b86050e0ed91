"""
Schemas Package for Order Surcharges
====================================

Pydantic models describing the data the surcharge logic works on. They are
kept apart from the logic so that the reconciler, the config layer and the
trigger adapter can share them without circular imports.

Schema Organization:
--------------------
- **cart.py**: Cart, LineItem, prices and tax rules
- **context.py**: SalesChannelContext and PaymentMethod
- **surcharges.py**: SurchargeKind, SurchargeConfig, CartDelta, warnings

Pydantic Configuration:
-----------------------
All models use pydantic v2 defaults and are mutable: the reconciler updates
carts and line items in place.
"""

from .cart import (
    Cart,
    CartPrice,
    CalculatedPrice,
    CalculatedTax,
    DuplicateLineItemError,
    LineItem,
    LineItemKind,
    QuantityPriceDefinition,
    TaxRule,
)
from .context import PaymentMethod, SalesChannelContext
from .surcharges import (
    RESERVED_LINE_ITEM_IDS,
    CartDelta,
    ReconcileWarning,
    SurchargeConfig,
    SurchargeKind,
    WarningCode,
)

__all__ = [
    "Cart",
    "CartPrice",
    "CalculatedPrice",
    "CalculatedTax",
    "DuplicateLineItemError",
    "LineItem",
    "LineItemKind",
    "QuantityPriceDefinition",
    "TaxRule",
    "PaymentMethod",
    "SalesChannelContext",
    "RESERVED_LINE_ITEM_IDS",
    "CartDelta",
    "ReconcileWarning",
    "SurchargeConfig",
    "SurchargeKind",
    "WarningCode",
]
