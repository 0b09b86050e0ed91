import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from order_surcharges.models import Base
from order_surcharges.services.cart_store import InMemoryCartStore
from order_surcharges.services.labels import SnippetLabelProvider
from order_surcharges.services.settings import SystemConfigProvider
from order_surcharges.services.triggers import SurchargeTriggerAdapter

CHANNEL_ID = "storefront"


@pytest.fixture
def session_factory():
    """Session factory bound to an in-memory SQLite DB.

    Uses StaticPool so all connections share the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    yield TestingSessionLocal

    engine.dispose()


@pytest.fixture
def empty_config_provider(session_factory):
    """SystemConfigProvider with nothing configured."""
    return SystemConfigProvider(session_factory)


@pytest.fixture
def config_provider(session_factory):
    """SystemConfigProvider seeded with global surcharge settings.

    COD fee 5.00, logistic surcharge 2.50, default tax 19%, both active.
    """
    provider = SystemConfigProvider(session_factory)
    provider.set("OrderSurcharges.config.codFeeActive", True)
    provider.set("OrderSurcharges.config.codFeeAmount", 5.0)
    provider.set("OrderSurcharges.config.logisticSurchargeActive", True)
    provider.set("OrderSurcharges.config.logisticSurchargeAmount", 2.5)
    provider.set("OrderSurcharges.config.defaultTaxRate", 19.0)
    provider.set("OrderSurcharges.config.codPaymentHandlerIdentifier", "CashPayment")
    return provider


@pytest.fixture
def cart_store():
    return InMemoryCartStore()


@pytest.fixture
def adapter(config_provider, cart_store):
    return SurchargeTriggerAdapter(
        config_provider=config_provider,
        cart_store=cart_store,
        labels=SnippetLabelProvider(),
    )
