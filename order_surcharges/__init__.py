"""
Order Surcharges
================

Keeps two derived cart line items in sync with the cart: a cash-on-delivery
fee and a logistic surcharge.

Package Layout:
---------------
- **schemas**: Pydantic models (cart, context, surcharge config, deltas)
- **surcharges**: Decision logic, centred on ``surcharges.reconciler.reconcile``
- **services**: Config provider, labels, cart store and the trigger adapter
- **app_factory**: Wires a trigger adapter with default services

Usage:
------
    from order_surcharges.app_factory import create_trigger_adapter

    adapter = create_trigger_adapter()
    delta = adapter.on_cart_changed(cart, context)
"""
