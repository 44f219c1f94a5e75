"""
Shop session - the per-client store object.

Owns one client's catalog, cart, wishlist and theme preference, wires the
catalog signals into the cart and wishlist, and exposes the settings used
for totals. Components are only mutated through their own methods.
"""

from decimal import Decimal
from typing import List, Optional
import uuid

from flask import current_app, g, session

from storefront.models import Product, ShopSettings, Totals
from storefront.services.cart_service import CartEngine
from storefront.services.catalog_service import CatalogStore
from storefront.services.document_service import StorefrontDocuments, get_documents
from storefront.services.filter_service import filter_products
from storefront.services.state_store import ClientState, StateStore, get_state_store
from storefront.services.theme_service import ThemePreference
from storefront.services.wishlist_service import WishlistSet

CLIENT_ID_KEY = 'client_id'
EDITING_ID_KEY = 'editing_product_id'


class ShopSession:

    def __init__(self, store: StateStore, client_id: str, defaults: Optional[ShopSettings] = None):
        self.client_id = client_id
        self.state = ClientState(store, client_id)
        self.defaults = defaults or ShopSettings()
        self.settings = self.defaults
        self.ready = False

        self.catalog = CatalogStore(self.state, default_currency=self.defaults.currency)
        self.cart = CartEngine(self.state)
        self.wishlist = WishlistSet(self.state)
        self.theme = ThemePreference(self.state)

        self.cart.connect_catalog(self.catalog)
        self.wishlist.connect_catalog(self.catalog)

    def load(self, documents: Optional[StorefrontDocuments]) -> 'ShopSession':
        """
        Restore durable state.

        Without documents the session is not ready: the catalog only holds
        what the client stored (edits are rejected when that is nothing), and
        totals use the default settings.
        """
        self.ready = documents is not None
        if documents is not None:
            self.settings = ShopSettings.from_document(documents.settings, self.defaults)
            self.catalog.load(seed=documents.products)
        else:
            self.settings = self.defaults
            self.catalog.load(seed=None)
        self.cart.load()
        self.wishlist.load()
        return self

    def visible_products(self, category: Optional[str] = 'all', term: Optional[str] = '') -> List[Product]:
        return filter_products(self.catalog.products, category, term)

    def totals(self) -> Totals:
        return self.cart.totals(self.settings)


def default_settings(config) -> ShopSettings:
    """Settings defaults from app config."""
    return ShopSettings(
        shipping_flat=Decimal(str(config.get('DEFAULT_SHIPPING_FLAT', '30'))),
        free_shipping_threshold=Decimal(str(config.get('DEFAULT_FREE_SHIPPING_THRESHOLD', '500'))),
        owner_phone=config.get('OWNER_PHONE_E164'),
        currency=config.get('DEFAULT_CURRENCY', 'MAD'),
    )


def current_client_id() -> str:
    """Client id from the signed session cookie, issued on first visit."""
    client_id = session.get(CLIENT_ID_KEY)
    if not client_id:
        client_id = uuid.uuid4().hex
        session[CLIENT_ID_KEY] = client_id
        session.permanent = True
    return client_id


def get_shop_session() -> ShopSession:
    """Shop session for the current request (built once per request)."""
    shop = g.get('shop_session')
    if shop is None:
        shop = ShopSession(
            get_state_store(),
            current_client_id(),
            default_settings(current_app.config),
        ).load(get_documents())
        editing_id = session.get(EDITING_ID_KEY)
        if editing_id and shop.catalog.get(editing_id):
            shop.catalog.editing_id = editing_id
        g.shop_session = shop
    return shop


def remember_edit_session(shop: ShopSession) -> None:
    """Keep the admin edit session across requests."""
    if shop.catalog.editing_id:
        session[EDITING_ID_KEY] = shop.catalog.editing_id
    else:
        session.pop(EDITING_ID_KEY, None)
