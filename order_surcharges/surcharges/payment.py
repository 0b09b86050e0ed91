"""
Cash-on-delivery detection.

A payment method counts as cash on delivery when its technical name matches
the configured handler identifier, or when its display name contains one of
the COD markers below. Display names are matched case-insensitively
as substrings.
"""

from typing import Optional

from ..schemas.context import PaymentMethod
from ..schemas.surcharges import SurchargeConfig

COD_NAME_MARKERS = ("nachnahme", "cash on delivery", "cod", "cash")


def is_cash_on_delivery(
    payment_method: Optional[PaymentMethod],
    config: Optional[SurchargeConfig],
) -> bool:
    """Return True if the payment method should carry the COD fee."""
    if payment_method is None:
        return False

    identifier = config.payment_handler_identifier if config is not None else None
    if identifier and payment_method.technical_name == identifier:
        return True

    name = (payment_method.name or "").lower()
    return any(marker in name for marker in COD_NAME_MARKERS)
