"""
Interfaces for the capabilities the surcharge logic needs from the shop.

The reconciler only depends on LabelProvider. ConfigProvider and CartStore
are used by the trigger adapter around it.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..schemas.cart import Cart
from ..schemas.context import SalesChannelContext
from ..schemas.surcharges import SurchargeKind


class ConfigProvider(ABC):
    """
    Per-sales-channel surcharge settings.

    Implementations may return raw values (strings, floats, None); the
    settings loader turns them into a lenient SurchargeConfig.
    """

    @abstractmethod
    def get_active(self, kind: SurchargeKind, sales_channel_id: Optional[str]) -> Any:
        """Whether the surcharge is switched on."""

    @abstractmethod
    def get_amount(self, kind: SurchargeKind, sales_channel_id: Optional[str]) -> Any:
        """Net amount of the surcharge."""

    @abstractmethod
    def get_default_tax_rate(self, sales_channel_id: Optional[str]) -> Any:
        """Tax rate percent used when the cart yields none."""

    @abstractmethod
    def get_cod_handler_identifier(self, sales_channel_id: Optional[str]) -> Any:
        """Technical payment method name that counts as cash on delivery."""


class LabelProvider(ABC):
    """Translated display labels for surcharge line items."""

    @abstractmethod
    def label(self, kind: SurchargeKind, locale: Optional[str]) -> str:
        """Return the label for a surcharge kind. Must not raise."""


class CartStore(ABC):
    """Loading, recalculating and saving carts."""

    @abstractmethod
    def load(self, token: str, context: SalesChannelContext) -> Cart:
        """Return the cart for a token, creating an empty one if needed."""

    @abstractmethod
    def recalculate(self, cart: Cart, context: SalesChannelContext) -> None:
        """Recompute cart totals after line items changed."""

    @abstractmethod
    def persist(self, cart: Cart) -> None:
        """Save the cart."""

