"""
Surcharge Schemas for Order Surcharges
======================================

Models shared by the reconciler, the config layer and the trigger adapter.

Surcharge Kinds:
----------------
- **cod_fee**: Cash-on-delivery handling fee. Only applies when the selected
  payment method is classified as cash on delivery.
- **logistic_surcharge**: Flat charge on every cart holding products.

Each kind owns one reserved line item id (``cod-fee``,
``logistic-surcharge``); a cart holds at most one item per reserved id.

Lenient Config:
---------------
SurchargeConfig never rejects input. Values that cannot be read as numbers
become 0 (amount) or the fallback tax rate, unreadable flags become False.
The settings loader reports those cases as ``config_missing`` warnings.

Deltas:
-------
``reconcile`` returns a CartDelta listing the reserved ids it added, updated,
removed or collapsed. Warnings alone do not count as changes.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..config import FALLBACK_TAX_RATE


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Read a config value as a finite Decimal, or return default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return default
    if not result.is_finite():
        return default
    return result


def to_bool(value: Any) -> bool:
    """Read a config flag. Anything unrecognised is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return False


class SurchargeKind(str, Enum):
    """The two derived surcharges."""
    COD_FEE = "cod_fee"
    LOGISTIC_SURCHARGE = "logistic_surcharge"

    @property
    def line_item_id(self) -> str:
        return RESERVED_LINE_ITEM_IDS[self]


RESERVED_LINE_ITEM_IDS = {
    SurchargeKind.COD_FEE: "cod-fee",
    SurchargeKind.LOGISTIC_SURCHARGE: "logistic-surcharge",
}


class SurchargeConfig(BaseModel):
    """
    Per-sales-channel settings for one surcharge kind.

    Attributes:
        kind: Which surcharge these settings belong to
        active: Master switch for the surcharge
        amount: Net amount charged; <= 0 suppresses the surcharge
        default_tax_rate: Percent used when no other tax rate resolves
        payment_handler_identifier: Technical payment method name that counts
            as cash on delivery (COD fee only)
    """
    kind: SurchargeKind
    active: bool = False
    amount: Decimal = Decimal("0")
    default_tax_rate: Decimal = FALLBACK_TAX_RATE
    payment_handler_identifier: Optional[str] = None

    @field_validator("active", mode="before")
    @classmethod
    def _lenient_active(cls, value: Any) -> bool:
        return to_bool(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _lenient_amount(cls, value: Any) -> Decimal:
        return to_decimal(value, Decimal("0"))

    @field_validator("default_tax_rate", mode="before")
    @classmethod
    def _lenient_tax_rate(cls, value: Any) -> Decimal:
        return to_decimal(value, FALLBACK_TAX_RATE)

    @field_validator("payment_handler_identifier", mode="before")
    @classmethod
    def _lenient_identifier(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None


class WarningCode(str, Enum):
    CONFIG_MISSING = "config_missing"
    TAX_RATE_UNRESOLVED = "tax_rate_unresolved"
    DUPLICATE_SURCHARGE = "duplicate_surcharge"


class ReconcileWarning(BaseModel):
    """Non-fatal condition observed while reconciling."""
    code: WarningCode
    kind: Optional[SurchargeKind] = None
    message: str


class CartDelta(BaseModel):
    """Reserved line item ids touched by one reconciliation."""
    added: List[str] = Field(default_factory=list)
    updated: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)
    collapsed: List[str] = Field(default_factory=list)
    warnings: List[ReconcileWarning] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.updated or self.removed or self.collapsed)

    def merge(self, other: "CartDelta") -> "CartDelta":
        """Fold another delta into this one, keeping ids unique."""
        for name in ("added", "updated", "removed", "collapsed"):
            target = getattr(self, name)
            for line_item_id in getattr(other, name):
                if line_item_id not in target:
                    target.append(line_item_id)
        self.warnings.extend(other.warnings)
        return self
