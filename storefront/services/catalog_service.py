"""Catalog store - product CRUD with identity cascade into cart and wishlist."""

from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from storefront.exceptions import DocumentLoadError, NotFoundError, ValidationError
from storefront.models import Product
from storefront.services.events import product_updated, product_deleted, catalog_reset
from storefront.services.state_store import ClientState, STORAGE_KEYS
from storefront.utils.number_format import parse_decimal

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ('id', 'title', 'image')


class CatalogStore:
    """
    Ordered product collection keyed by ``id``.

    Mutations validate first and only then touch the collection, so a
    rejected call leaves the catalog, cart and wishlist unchanged. Edits and
    deletions are announced through ``storefront.services.events`` before
    the catalog itself is persisted.
    """

    def __init__(self, state: Optional[ClientState] = None, default_currency: str = 'MAD'):
        self._state = state
        self._products: List[Product] = []
        self.default_currency = default_currency
        self.editing_id: Optional[str] = None
        self.seeded = True

    @property
    def products(self) -> List[Product]:
        return list(self._products)

    def __len__(self):
        return len(self._products)

    def get(self, product_id: Optional[str]) -> Optional[Product]:
        return next((p for p in self._products if p.id == product_id), None)

    def require(self, product_id: Optional[str]) -> Product:
        product = self.get(product_id)
        if product is None:
            raise NotFoundError(f'Product {product_id} not found', payload={'id': product_id})
        return product

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self, seed: Optional[Iterable[Any]] = None) -> None:
        """
        Restore the admin-edited catalog, or start from ``seed`` (the
        catalog document) when nothing usable is stored.

        A ``seed`` of None means the catalog document is unavailable: with
        nothing stored either, the catalog is empty and rejects edits until
        it is loaded again with a seed.
        """
        stored = None
        if self._state is not None:
            stored = self._state.load(STORAGE_KEYS['catalog'], None, expected_type=list)
        self.seeded = stored is not None or seed is not None
        entries = stored if stored is not None else (seed or [])
        self._products = self._parse_entries(entries)
        self.editing_id = None

    def _parse_entries(self, entries: Iterable[Any]) -> List[Product]:
        products = []
        for entry in entries:
            if isinstance(entry, Product):
                products.append(entry)
            elif isinstance(entry, Mapping):
                products.append(Product.from_dict(entry, self.default_currency))
            else:
                logger.warning(f"[CATALOG] Skipping entry that is not an object: {entry!r}")
        return products

    def _persist(self) -> bool:
        if self._state is None:
            return False
        return self._state.save(STORAGE_KEYS['catalog'], self.export_snapshot())

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _build(self, payload: Any, base: Optional[Product] = None) -> Product:
        """Merge ``payload`` over ``base`` and parse it strictly."""
        if not isinstance(payload, Mapping):
            raise ValidationError('Product payload must be an object', code='invalid_payload')

        data: Dict[str, Any] = base.to_dict() if base else {}
        data.update(payload)
        try:
            price = parse_decimal(data.get('price'))
        except ValueError:
            raise ValidationError('Price must be a number', code='invalid_price', payload={'field': 'price'})

        product = Product.from_dict(data, self.default_currency)
        product.price = price
        return product

    def _validate(self, product: Product, current_id: Optional[str] = None) -> None:
        """Create rules; an update that keeps ``current_id`` skips the id check."""
        for field_name in REQUIRED_TEXT_FIELDS:
            if not getattr(product, field_name):
                raise ValidationError(
                    f'Product {field_name} is required', code='missing_field', payload={'field': field_name}
                )
        if product.price <= 0:
            raise ValidationError(
                'Price must be greater than 0', code='invalid_price', payload={'field': 'price'}
            )
        if product.id != current_id and self.get(product.id) is not None:
            raise ValidationError(
                f'Product id {product.id} already exists', code='duplicate_id', payload={'field': 'id'}
            )

    def _require_seed(self) -> None:
        if not self.seeded:
            raise DocumentLoadError('Catalog document unavailable, edits are disabled until it loads')

    def _index_of(self, product_id: Optional[str]) -> Optional[int]:
        return next((i for i, p in enumerate(self._products) if p.id == product_id), None)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, payload: Mapping[str, Any]) -> Product:
        self._require_seed()
        product = self._build(payload)
        self._validate(product)
        self._products.append(product)
        logger.info(f"[CATALOG] Created product {product.id}")
        self._persist()
        return product

    def update(self, target_id: str, payload: Mapping[str, Any]) -> Product:
        """
        Edit a product; ``payload`` may carry a new ``id``.

        Cart lines and wishlist entries follow the product to its new id and
        cart lines pick up the new title, price and image.
        """
        self._require_seed()
        index = self._index_of(target_id)
        if index is None:
            raise NotFoundError(f'Product {target_id} not found', payload={'id': target_id})

        updated = self._build(payload, base=self._products[index])
        self._validate(updated, current_id=target_id)

        self._products[index] = updated
        product_updated.send(self, old_id=target_id, product=updated)
        if self.editing_id == target_id:
            self.editing_id = None
        if updated.id != target_id:
            logger.info(f"[CATALOG] Renamed product {target_id} -> {updated.id}")
        self._persist()
        return updated

    def delete(self, product_id: str) -> bool:
        """Remove every product with this id; no-op (False) when absent."""
        self._require_seed()
        remaining = [p for p in self._products if p.id != product_id]
        if len(remaining) == len(self._products):
            return False

        self._products = remaining
        product_deleted.send(self, product_id=product_id)
        if self.editing_id == product_id:
            self.editing_id = None
        logger.info(f"[CATALOG] Deleted product {product_id}")
        self._persist()
        return True

    def bulk_import(self, products: Iterable[Any]) -> int:
        """
        Append externally supplied products as they are.

        Ids are not checked against the catalog; collisions are only logged.
        Returns the number of products appended.
        """
        self._require_seed()
        imported = self._parse_entries(products or [])
        seen = {p.id for p in self._products}
        duplicates = []
        for product in imported:
            if product.id in seen:
                duplicates.append(product.id)
            seen.add(product.id)
        if duplicates:
            logger.warning(f"[CATALOG] Import appended duplicate ids: {', '.join(duplicates)}")

        self._products.extend(imported)
        logger.info(f"[CATALOG] Imported {len(imported)} products")
        self._persist()
        return len(imported)

    def reset(self, products: Iterable[Any]) -> None:
        """Replace the whole catalog; the cart is emptied."""
        self._require_seed()
        self._products = self._parse_entries(products or [])
        self.editing_id = None
        catalog_reset.send(self)
        self._persist()

    def export_snapshot(self) -> List[Dict[str, Any]]:
        return [product.to_dict() for product in self._products]

    # ------------------------------------------------------------------
    # Edit session
    # ------------------------------------------------------------------

    def begin_edit(self, product_id: str) -> Product:
        product = self.require(product_id)
        self.editing_id = product.id
        return product

    def cancel_edit(self) -> None:
        self.editing_id = None
