"""Stored state model - durable key/value entries for client state."""
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from storefront.database import Base


class StoredState(Base):
    """
    One durable entry (cart snapshot, wishlist ids, theme, catalog).

    ``key`` is already namespaced per client by the state store; ``value``
    holds the JSON document.
    """

    __tablename__ = 'stored_state'

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<StoredState(key='{self.key}')>"
