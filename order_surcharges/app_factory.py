"""
Factory wiring the surcharge trigger adapter with its default services.

The shop normally supplies its own CartStore; the defaults here are enough to
run the surcharge logic stand-alone (and are what the tests use).
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from .logging_config import setup_logging
from .services.cart_store import InMemoryCartStore
from .services.interfaces import CartStore, ConfigProvider, LabelProvider
from .services.labels import SnippetLabelProvider
from .services.settings import SystemConfigProvider
from .services.triggers import SurchargeTriggerAdapter

logger = logging.getLogger(__name__)


def create_trigger_adapter(
    session_factory: Optional[Callable[[], Session]] = None,
    cart_store: Optional[CartStore] = None,
    labels: Optional[LabelProvider] = None,
    config_provider: Optional[ConfigProvider] = None,
    configure_logging: bool = True,
) -> SurchargeTriggerAdapter:
    """
    Create a SurchargeTriggerAdapter.

    Args:
        session_factory: Session factory for the system config table.
                         Defaults to db.SessionLocal (tables are created).
        cart_store: Cart store; defaults to an InMemoryCartStore
        labels: Label provider; defaults to SnippetLabelProvider
        config_provider: Overrides the system config provider entirely
        configure_logging: Call setup_logging() first

    Returns:
        Configured trigger adapter
    """
    if configure_logging:
        setup_logging()

    if config_provider is None:
        if session_factory is None:
            # Import here so the default engine is only built when needed
            from .db import SessionLocal, init_db
            init_db()
            session_factory = SessionLocal
        config_provider = SystemConfigProvider(session_factory)

    cart_store = cart_store or InMemoryCartStore()
    adapter = SurchargeTriggerAdapter(
        config_provider=config_provider,
        cart_store=cart_store,
        labels=labels or SnippetLabelProvider(),
    )
    logger.info(
        "Created surcharge trigger adapter (config=%s, store=%s)",
        type(config_provider).__name__,
        type(cart_store).__name__,
    )
    return adapter
