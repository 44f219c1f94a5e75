"""Models package - exports the storefront domain models."""
from storefront.models.product import Product
from storefront.models.cart_line import CartLine, LineKey
from storefront.models.promo import Promo, PromoType
from storefront.models.settings import ShopSettings
from storefront.models.totals import Totals
from storefront.models.stored_state import StoredState

__all__ = [
    'Product', 'CartLine', 'LineKey', 'Promo', 'PromoType',
    'ShopSettings', 'Totals', 'StoredState',
]
