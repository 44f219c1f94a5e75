"""Category and text filters over the catalog (storefront grid and admin search)."""
from typing import Iterable, List, Optional

from storefront.models import Product

ALL_CATEGORIES = 'all'


def filter_products(products: Iterable[Product], category: Optional[str] = ALL_CATEGORIES, term: Optional[str] = '') -> List[Product]:
    """
    Filter the storefront grid.

    ``category`` 'all' (or empty) matches everything, otherwise it must equal
    the product category ignoring case. ``term`` is trimmed; an empty term
    matches everything, otherwise it must appear in the title, brand or id.
    Catalog order is preserved.
    """
    category = (category or ALL_CATEGORIES).strip().casefold()
    term = (term or '').strip().casefold()

    def matches(product: Product) -> bool:
        if category != ALL_CATEGORIES and (product.category or '').casefold() != category:
            return False
        if not term:
            return True
        return (
            term in (product.title or '').casefold()
            or term in (product.brand or '').casefold()
            or term in (product.id or '').casefold()
        )

    return [product for product in products if matches(product)]


def filter_admin(products: Iterable[Product], query: Optional[str], mode: str = 'name') -> List[Product]:
    """Admin search: mode 'id' matches id substrings, any other mode matches titles."""
    value = (query or '').strip().casefold()
    products = list(products)
    if not value:
        return products
    if mode == 'id':
        return [p for p in products if value in (p.id or '').casefold()]
    return [p for p in products if value in (p.title or '').casefold()]
