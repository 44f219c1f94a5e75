"""
Catalog domain signals.

The catalog store is the sender; the cart engine and wishlist set of the
same shop session connect with ``sender=catalog`` so sessions never see
each other's events.

- product_updated(sender, old_id, product): a product was edited; ``old_id``
  differs from ``product.id`` when its identity changed.
- product_deleted(sender, product_id): a product left the catalog.
- catalog_reset(sender): the whole catalog was replaced.
"""
from blinker import Namespace

catalog_signals = Namespace()

product_updated = catalog_signals.signal('product-updated')
product_deleted = catalog_signals.signal('product-deleted')
catalog_reset = catalog_signals.signal('catalog-reset')
