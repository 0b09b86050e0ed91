"""
Services Package for Order Surcharges
=====================================

Everything around the reconciler that talks to the outside world.

Available Services:
-------------------
- **interfaces**: ConfigProvider, LabelProvider and CartStore base classes
- **settings**: System config provider and surcharge config loading
- **labels**: Snippet-based surcharge labels
- **cart_store**: In-memory reference cart store
- **triggers**: Trigger adapter invoking reconciliation for shop events

Usage:
------
    from order_surcharges.services.triggers import SurchargeTriggerAdapter
    from order_surcharges.services.settings import SystemConfigProvider
    from order_surcharges.services.cart_store import InMemoryCartStore
"""
