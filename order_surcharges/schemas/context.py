"""
Sales channel context schemas.

The context is supplied by the shop for every request: it names the cart
token, the sales channel whose surcharge config applies, the customer's
locale and selected payment method, and optionally the tax rules that apply
to the current customer.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .cart import TaxRule


class PaymentMethod(BaseModel):
    """Read-only payment method as selected by the customer."""
    name: str
    technical_name: str = ""


class SalesChannelContext(BaseModel):
    """Per-request shop context."""
    token: str
    sales_channel_id: str
    locale: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    tax_rules: List[TaxRule] = Field(default_factory=list)
