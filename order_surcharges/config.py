"""
Configuration Module for Order Surcharges
==========================================

This module centralizes environment variables and constants used by the
surcharge reconciliation package. Per-sales-channel surcharge settings
(active flags, amounts, default tax rate, COD handler identifier) are NOT
defined here: they live in the system config table and are read through
``services.settings.SystemConfigProvider``.

Configuration Categories:
-------------------------
- **Database**: Connection URL for the system config table.

- **Surcharges**: Fallback tax rate and the key prefix under which the
  per-channel surcharge settings are stored.

- **Localization**: Default locale used when a context carries no locale or
  an unknown one.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./order_surcharges.db")
- FALLBACK_TAX_RATE: Tax rate percent used when nothing else resolves
  (default: "19.0")
- DEFAULT_LOCALE: Locale for surcharge labels (default: "en-GB")
- LOG_LEVEL: See logging_config.py

Usage:
------
    from order_surcharges.config import FALLBACK_TAX_RATE, CONFIG_KEY_PREFIX
"""

import os
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

# Load .env before any value below is read
load_dotenv()


# =============================================================================
# Database Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./order_surcharges.db")


# =============================================================================
# Surcharge Configuration
# =============================================================================

def _parse_decimal(raw: str, default: str) -> Decimal:
    try:
        return Decimal(raw)
    except (InvalidOperation, TypeError):
        return Decimal(default)


# Used when neither the context, the cart nor the channel config yields a rate
FALLBACK_TAX_RATE: Decimal = _parse_decimal(os.getenv("FALLBACK_TAX_RATE", "19.0"), "19.0")

# System config keys look like "OrderSurcharges.config.codFeeAmount"
CONFIG_KEY_PREFIX: str = "OrderSurcharges.config"


# =============================================================================
# Localization
# =============================================================================

DEFAULT_LOCALE: str = os.getenv("DEFAULT_LOCALE", "en-GB")
