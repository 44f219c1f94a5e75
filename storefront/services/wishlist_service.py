"""Wishlist - product id membership for one client (persisted)."""
from typing import Any, List, Optional
import logging

from storefront.models import Product
from storefront.services.events import product_updated, product_deleted
from storefront.services.state_store import ClientState, STORAGE_KEYS

logger = logging.getLogger(__name__)


class WishlistSet:
    """Set of product ids; the stored form is a list in insertion order."""

    def __init__(self, state: Optional[ClientState] = None):
        self._state = state
        self._ids: List[str] = []

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def __contains__(self, product_id):
        return product_id in self._ids

    def __len__(self):
        return len(self._ids)

    def load(self) -> None:
        if self._state is None:
            return
        stored = self._state.load(STORAGE_KEYS['wishlist'], [])
        ids = []
        for value in stored:
            if isinstance(value, str) and value and value not in ids:
                ids.append(value)
        self._ids = ids

    def _persist(self) -> bool:
        if self._state is None:
            return False
        return self._state.save(STORAGE_KEYS['wishlist'], list(self._ids))

    def toggle(self, product_id: str) -> bool:
        """Add the id if absent, remove it if present; returns the new membership."""
        if product_id in self._ids:
            self._ids.remove(product_id)
            member = False
        else:
            self._ids.append(product_id)
            member = True
        self._persist()
        return member

    def connect_catalog(self, catalog: Any) -> None:
        product_updated.connect(self._on_product_updated, sender=catalog)
        product_deleted.connect(self._on_product_deleted, sender=catalog)

    def _on_product_updated(self, sender, old_id: str, product: Product) -> None:
        if product.id == old_id or old_id not in self._ids:
            return
        index = self._ids.index(old_id)
        if product.id in self._ids:
            del self._ids[index]
        else:
            self._ids[index] = product.id
        self._persist()

    def _on_product_deleted(self, sender, product_id: str) -> None:
        if product_id in self._ids:
            self._ids.remove(product_id)
            self._persist()
