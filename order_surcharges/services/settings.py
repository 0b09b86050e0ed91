"""
Surcharge Settings Service
==========================

Reads per-sales-channel surcharge settings from the system config table and
turns them into SurchargeConfig objects the reconciler can use.

System Config Keys:
-------------------
All keys live under CONFIG_KEY_PREFIX ("OrderSurcharges.config"):

- codFeeActive / codFeeAmount
- logisticSurchargeActive / logisticSurchargeAmount
- defaultTaxRate (shared by both kinds)
- codPaymentHandlerIdentifier

Channel Inheritance:
--------------------
A row for the requested sales channel wins over the global row
(sales_channel_id NULL). If neither exists the value is None.

Missing or Broken Values:
-------------------------
load_surcharge_config never raises. A provider error, a missing flag or a
value that is not a number is reported as a ``config_missing`` warning and
replaced by a safe default: inactive, amount 0, FALLBACK_TAX_RATE.

Usage:
------
    provider = SystemConfigProvider(SessionLocal)
    provider.set("OrderSurcharges.config.codFeeActive", True, "storefront-de")

    cod, logistic, warnings = load_surcharge_configs(provider, "storefront-de")
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..config import CONFIG_KEY_PREFIX
from ..models import SystemConfigEntry
from ..schemas.surcharges import (
    ReconcileWarning,
    SurchargeConfig,
    SurchargeKind,
    WarningCode,
    to_decimal,
)
from .interfaces import ConfigProvider


logger = logging.getLogger(__name__)


ACTIVE_KEYS = {
    SurchargeKind.COD_FEE: f"{CONFIG_KEY_PREFIX}.codFeeActive",
    SurchargeKind.LOGISTIC_SURCHARGE: f"{CONFIG_KEY_PREFIX}.logisticSurchargeActive",
}
AMOUNT_KEYS = {
    SurchargeKind.COD_FEE: f"{CONFIG_KEY_PREFIX}.codFeeAmount",
    SurchargeKind.LOGISTIC_SURCHARGE: f"{CONFIG_KEY_PREFIX}.logisticSurchargeAmount",
}
DEFAULT_TAX_RATE_KEY = f"{CONFIG_KEY_PREFIX}.defaultTaxRate"
COD_HANDLER_KEY = f"{CONFIG_KEY_PREFIX}.codPaymentHandlerIdentifier"


# =============================================================================
# System Config Provider
# =============================================================================

class SystemConfigProvider(ConfigProvider):
    """
    ConfigProvider backed by the system_config table.

    Args:
        session_factory: Callable returning a new SQLAlchemy Session,
                         usually db.SessionLocal
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str, sales_channel_id: Optional[str] = None, default: Any = None) -> Any:
        """Return the value for key, preferring the channel over the global row."""
        db = self._session_factory()
        try:
            rows = (
                db.query(SystemConfigEntry)
                .filter(SystemConfigEntry.configuration_key == key)
                .filter(
                    (SystemConfigEntry.sales_channel_id == sales_channel_id)
                    | (SystemConfigEntry.sales_channel_id.is_(None))
                )
                .all()
            )
        finally:
            db.close()

        # Channel row first, then global
        rows.sort(key=lambda row: row.sales_channel_id is None)
        for row in rows:
            value = (row.configuration_value or {}).get("_value")
            if value is not None:
                return value
        return default

    def set(self, key: str, value: Any, sales_channel_id: Optional[str] = None) -> None:
        """Insert or update one config value."""
        db = self._session_factory()
        try:
            query = db.query(SystemConfigEntry).filter(SystemConfigEntry.configuration_key == key)
            if sales_channel_id is None:
                query = query.filter(SystemConfigEntry.sales_channel_id.is_(None))
            else:
                query = query.filter(SystemConfigEntry.sales_channel_id == sales_channel_id)
            row = query.first()

            if row is None:
                row = SystemConfigEntry(configuration_key=key, sales_channel_id=sales_channel_id)
                db.add(row)
            row.configuration_value = {"_value": value}
            db.commit()
        finally:
            db.close()

        logger.debug("Set system config %s for channel %s", key, sales_channel_id or "<global>")

    def get_active(self, kind: SurchargeKind, sales_channel_id: Optional[str]) -> Any:
        return self.get(ACTIVE_KEYS[kind], sales_channel_id)

    def get_amount(self, kind: SurchargeKind, sales_channel_id: Optional[str]) -> Any:
        return self.get(AMOUNT_KEYS[kind], sales_channel_id)

    def get_default_tax_rate(self, sales_channel_id: Optional[str]) -> Any:
        return self.get(DEFAULT_TAX_RATE_KEY, sales_channel_id)

    def get_cod_handler_identifier(self, sales_channel_id: Optional[str]) -> Any:
        return self.get(COD_HANDLER_KEY, sales_channel_id)


# =============================================================================
# Config Loading
# =============================================================================

def load_surcharge_config(
    provider: ConfigProvider,
    kind: SurchargeKind,
    sales_channel_id: Optional[str],
) -> Tuple[SurchargeConfig, List[ReconcileWarning]]:
    """
    Build the SurchargeConfig for one kind and channel.

    Returns:
        (config, warnings). Never raises.
    """
    warnings: List[ReconcileWarning] = []
    unreadable = set()

    def missing(message: str) -> None:
        warnings.append(ReconcileWarning(code=WarningCode.CONFIG_MISSING, kind=kind, message=message))
        logger.warning("Surcharge config for %s on channel %s: %s", kind.value, sales_channel_id, message)

    def read(name: str, getter: Callable[..., Any], *args: Any) -> Any:
        try:
            return getter(*args)
        except Exception:
            logger.exception("Reading %s for %s failed", name, kind.value)
            unreadable.add(name)
            missing(f"{name} could not be read")
            return None

    active = read("active flag", provider.get_active, kind, sales_channel_id)
    amount = read("amount", provider.get_amount, kind, sales_channel_id)
    default_tax_rate = read("default tax rate", provider.get_default_tax_rate, sales_channel_id)
    handler = None
    if kind == SurchargeKind.COD_FEE:
        handler = read("COD handler identifier", provider.get_cod_handler_identifier, sales_channel_id)

    config = SurchargeConfig(
        kind=kind,
        active=active,
        amount=amount,
        default_tax_rate=default_tax_rate,
        payment_handler_identifier=handler,
    )

    if active is None and "active flag" not in unreadable:
        missing("active flag not set, treating as inactive")
    if config.active and amount is None and "amount" not in unreadable:
        missing("amount not set, treating as 0")
    elif amount is not None and to_decimal(amount) is None:
        missing(f"amount {amount!r} is not a number, treating as 0")
    if default_tax_rate is not None and to_decimal(default_tax_rate) is None:
        missing(f"default tax rate {default_tax_rate!r} is not a number, using {config.default_tax_rate}")

    return config, warnings


def load_surcharge_configs(
    provider: ConfigProvider,
    sales_channel_id: Optional[str],
) -> Tuple[SurchargeConfig, SurchargeConfig, List[ReconcileWarning]]:
    """Load the COD fee and logistic surcharge configs for a channel."""
    cod_config, cod_warnings = load_surcharge_config(provider, SurchargeKind.COD_FEE, sales_channel_id)
    logistic_config, logistic_warnings = load_surcharge_config(
        provider, SurchargeKind.LOGISTIC_SURCHARGE, sales_channel_id
    )
    return cod_config, logistic_config, cod_warnings + logistic_warnings
