from sqlalchemy import (
    Column,
    Integer,
    String,
    JSON,
    DateTime,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SystemConfigEntry(Base):
    """
    One system config value, optionally scoped to a sales channel.

    A row with sales_channel_id NULL is the global default; a row for a
    specific channel overrides it for that channel only.
    """
    __tablename__ = "system_config"

    id = Column(Integer, primary_key=True, index=True)
    configuration_key = Column(String, nullable=False, index=True)  # e.g. "OrderSurcharges.config.codFeeAmount"
    sales_channel_id = Column(String, nullable=True, index=True)
    configuration_value = Column(JSON, nullable=True)  # {"_value": ...}
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("configuration_key", "sales_channel_id", name="uix_system_config_key_channel"),
    )
