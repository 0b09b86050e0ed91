"""
Surcharge Reconciler
====================

The one decision function behind every surcharge trigger. Given a cart, the
request context and the channel's surcharge configs it works out which
derived items must exist and at what price, then applies the minimal set of
changes to the cart in place.

Decision Order:
---------------
1. **Duplicate collapse**: more than one item with a reserved id is caller
   misuse. The last instance is kept and a ``duplicate_surcharge`` warning
   is reported.

2. **Cleanup cascade**: when the cart holds nothing but surcharges, both
   surcharges are removed regardless of their config.

3. **Per kind**, first matching rule wins:

   ========================================  ===========================
   config missing or inactive                remove if present
   COD only: payment is not cash on delivery remove if present
   no product items                          remove if present
   amount <= 0                               remove if present
   already present                           update if rate/amount differ
   otherwise                                 create
   ========================================  ===========================

Tax Tracking:
-------------
The tax rate is resolved against the cart as it is *now*, so an existing
surcharge follows the first product's rate when the cart composition changes.

Side Effects:
-------------
Only the passed-in cart is mutated. Nothing is persisted here; the trigger
adapter decides what to do with the returned CartDelta.

Usage:
------
    delta = reconcile(cart, context, cod_config, logistic_config)
    if delta.has_changes:
        store.recalculate(cart, context)
        store.persist(cart)
"""

import logging
from typing import Optional, TYPE_CHECKING

from ..schemas.cart import Cart, LineItem
from ..schemas.context import SalesChannelContext
from ..schemas.surcharges import (
    CartDelta,
    ReconcileWarning,
    SurchargeConfig,
    SurchargeKind,
    WarningCode,
)
from .composition import count_non_surcharge_items, has_product_items
from .line_items import apply_surcharge_price, build_surcharge_line_item
from .payment import is_cash_on_delivery
from .tax import resolve_tax_rate_with_source

if TYPE_CHECKING:
    from ..services.interfaces import LabelProvider

logger = logging.getLogger(__name__)

SURCHARGE_KINDS = (SurchargeKind.COD_FEE, SurchargeKind.LOGISTIC_SURCHARGE)


def reconcile(
    cart: Cart,
    context: Optional[SalesChannelContext],
    cod_config: Optional[SurchargeConfig],
    logistic_config: Optional[SurchargeConfig],
    labels: Optional["LabelProvider"] = None,
) -> CartDelta:
    """
    Bring the cart's derived surcharge items in line with its current state.

    Idempotent: a second call with unchanged inputs returns a delta without
    changes.

    Args:
        cart: Cart to reconcile, mutated in place
        context: Request context (payment method, locale, tax rules)
        cod_config: Channel settings for the COD fee, None if unconfigured
        logistic_config: Channel settings for the logistic surcharge
        labels: Label provider; defaults to the built-in snippet labels

    Returns:
        CartDelta with the reserved ids added, updated, removed or collapsed
    """
    if labels is None:
        # Import here to avoid circular imports
        from ..services.labels import SnippetLabelProvider
        labels = SnippetLabelProvider()

    delta = CartDelta()
    _collapse_duplicates(cart, delta)

    if count_non_surcharge_items(cart) == 0:
        for kind in SURCHARGE_KINDS:
            if _remove(cart, kind, delta):
                logger.info("Removed %s from cart %s: no items left", kind.value, cart.token)
        return delta

    configs = {
        SurchargeKind.COD_FEE: cod_config,
        SurchargeKind.LOGISTIC_SURCHARGE: logistic_config,
    }
    for kind in SURCHARGE_KINDS:
        try:
            _reconcile_kind(cart, context, kind, configs[kind], labels, delta)
        except Exception:
            logger.exception(
                "Could not reconcile %s for cart %s, leaving it unchanged",
                kind.value,
                cart.token,
            )

    if delta.has_changes:
        logger.debug(
            "Reconciled cart %s: added=%s updated=%s removed=%s",
            cart.token,
            delta.added,
            delta.updated,
            delta.removed,
        )
    return delta


# =============================================================================
# Internal Helpers
# =============================================================================

def _removal_reason(
    cart: Cart,
    context: Optional[SalesChannelContext],
    kind: SurchargeKind,
    config: SurchargeConfig,
) -> Optional[str]:
    """Why the surcharge must not exist, or None if it should."""
    if not config.active:
        return "inactive"
    if kind == SurchargeKind.COD_FEE:
        payment_method = context.payment_method if context is not None else None
        if not is_cash_on_delivery(payment_method, config):
            return "payment method is not cash on delivery"
    if not has_product_items(cart):
        return "no product items"
    if config.amount <= 0:
        return "amount is not positive"
    return None


def _reconcile_kind(
    cart: Cart,
    context: Optional[SalesChannelContext],
    kind: SurchargeKind,
    config: Optional[SurchargeConfig],
    labels: "LabelProvider",
    delta: CartDelta,
) -> None:
    if config is None:
        delta.warnings.append(ReconcileWarning(
            code=WarningCode.CONFIG_MISSING,
            kind=kind,
            message=f"No configuration for {kind.value}, treating it as inactive",
        ))
        if _remove(cart, kind, delta):
            logger.info("Removed %s from cart %s: not configured", kind.value, cart.token)
        return

    reason = _removal_reason(cart, context, kind, config)
    if reason is not None:
        if _remove(cart, kind, delta):
            logger.info("Removed %s from cart %s: %s", kind.value, cart.token, reason)
        return

    resolution = resolve_tax_rate_with_source(cart, context, config)
    existing = cart.get(kind.line_item_id)

    if existing is not None and _price_matches(existing, config, resolution.rate):
        return

    if not resolution.resolved:
        delta.warnings.append(ReconcileWarning(
            code=WarningCode.TAX_RATE_UNRESOLVED,
            kind=kind,
            message=f"No tax rate in context or cart, using {resolution.source.value} rate {resolution.rate}",
        ))

    locale = context.locale if context is not None else None
    label = labels.label(kind, locale)

    if existing is None:
        cart.add(build_surcharge_line_item(kind, label, config.amount, resolution.rate))
        delta.added.append(kind.line_item_id)
        logger.info(
            "Added %s to cart %s: %s at %s%% tax",
            kind.value,
            cart.token,
            config.amount,
            resolution.rate,
        )
    else:
        apply_surcharge_price(existing, config.amount, resolution.rate, label)
        delta.updated.append(kind.line_item_id)
        logger.info(
            "Updated %s in cart %s: %s at %s%% tax",
            kind.value,
            cart.token,
            config.amount,
            resolution.rate,
        )


def _price_matches(item: LineItem, config: SurchargeConfig, tax_rate) -> bool:
    """True if the item already carries this amount and tax rate."""
    definition = item.price_definition
    if definition is None or not definition.tax_rules:
        return False
    return definition.price == config.amount and definition.tax_rules[0].tax_rate == tax_rate


def _remove(cart: Cart, kind: SurchargeKind, delta: CartDelta) -> bool:
    if cart.remove(kind.line_item_id):
        delta.removed.append(kind.line_item_id)
        return True
    return False


def _collapse_duplicates(cart: Cart, delta: CartDelta) -> None:
    """Keep only the last instance of each reserved id."""
    for kind in SURCHARGE_KINDS:
        line_item_id = kind.line_item_id
        instances = cart.find_all(line_item_id)
        if len(instances) <= 1:
            continue

        keep = instances[-1]
        cart.line_items = [
            item for item in cart.line_items
            if item.id != line_item_id or item is keep
        ]
        delta.collapsed.append(line_item_id)
        delta.warnings.append(ReconcileWarning(
            code=WarningCode.DUPLICATE_SURCHARGE,
            kind=kind,
            message=f"Cart held {len(instances)} '{line_item_id}' items, kept the last one",
        ))
        logger.warning(
            "Cart %s held %d '%s' items, collapsed to one",
            cart.token,
            len(instances),
            line_item_id,
        )
