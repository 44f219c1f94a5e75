"""
Unit tests for the catalog store and its cascade into cart and wishlist.
"""

from decimal import Decimal

import pytest

from storefront.exceptions import DocumentLoadError, NotFoundError, ValidationError
from storefront.models import ShopSettings
from storefront.services.catalog_service import CatalogStore
from storefront.services.shop_session import ShopSession
from storefront.services.state_store import STORAGE_KEYS, get_state_store


NEW_PRODUCT = {
    'id': 'JKT-9',
    'title': 'Eclipse Jacket',
    'brand': 'ShadowWear',
    'category': 'Jackets',
    'price': '450.50',
    'image': 'https://cdn.example.com/jkt.jpg',
    'colors': ['Black', 'Black', 'Olive'],
    'sizes': ['L'],
}


class TestCreate:
    """Tests for product creation."""

    def test_create_appends_and_persists(self, shop, reopen):
        product = shop.catalog.create(NEW_PRODUCT)

        assert product.price == Decimal('450.50')
        assert product.colors == ['Black', 'Olive']
        assert shop.catalog.products[-1].id == 'JKT-9'

        reloaded = reopen(shop)
        assert reloaded.catalog.get('JKT-9').title == 'Eclipse Jacket'

    @pytest.mark.parametrize('field, value, code', [
        ('id', '', 'missing_field'),
        ('id', '   ', 'missing_field'),
        ('title', '', 'missing_field'),
        ('image', None, 'missing_field'),
        ('price', 0, 'invalid_price'),
        ('price', -5, 'invalid_price'),
        ('price', 'abc', 'invalid_price'),
        ('price', None, 'invalid_price'),
        ('id', 'P1', 'duplicate_id'),
    ])
    def test_create_rejects_bad_input(self, shop, field, value, code):
        before = shop.catalog.export_snapshot()
        payload = dict(NEW_PRODUCT, **{field: value})

        with pytest.raises(ValidationError) as exc:
            shop.catalog.create(payload)

        assert exc.value.code == code
        assert exc.value.status_code == 400
        assert shop.catalog.export_snapshot() == before

    def test_create_rejects_non_object_payload(self, shop):
        with pytest.raises(ValidationError):
            shop.catalog.create(['not', 'a', 'product'])


class TestUpdate:
    """Tests for product edits and identity changes."""

    def test_missing_target(self, shop):
        with pytest.raises(NotFoundError):
            shop.catalog.update('NOPE', {'title': 'x'})

    def test_rename_moves_cart_lines_and_wishlist(self, shop, reopen):
        p1 = shop.catalog.get('P1')
        shop.cart.add_line(p1, qty=2, color='Black')
        shop.cart.add_line(p1, color='Grey')
        shop.wishlist.toggle('P1')

        shop.catalog.update('P1', {'id': 'HOOD-1'})

        assert shop.catalog.get('P1') is None
        assert shop.catalog.get('HOOD-1') is not None
        assert [line.product_id for line in shop.cart.lines] == ['HOOD-1', 'HOOD-1']
        assert shop.wishlist.ids == ['HOOD-1']

        reloaded = reopen(shop)
        assert [line.product_id for line in reloaded.cart.lines] == ['HOOD-1', 'HOOD-1']
        assert reloaded.wishlist.ids == ['HOOD-1']
        assert reloaded.catalog.get('HOOD-1').title == 'Shadow Hoodie'

    def test_edit_refreshes_cart_display_fields(self, shop):
        shop.cart.add_line(shop.catalog.get('P1'), qty=3)
        shop.cart.add_line(shop.catalog.get('P2'))

        shop.catalog.update('P1', {'title': 'Shadow Hoodie v2', 'price': 180, 'image': 'https://cdn.example.com/v2.jpg'})

        line = shop.cart.lines[0]
        assert line.product_id == 'P1'
        assert line.title == 'Shadow Hoodie v2'
        assert line.price == Decimal('180')
        assert line.image == 'https://cdn.example.com/v2.jpg'
        assert shop.cart.lines[1].title == 'Night Cap'
        assert shop.totals().subtotal == Decimal('619.90')

    def test_rename_to_existing_id_changes_nothing(self, shop):
        shop.cart.add_line(shop.catalog.get('P1'))
        shop.wishlist.toggle('P1')

        with pytest.raises(ValidationError) as exc:
            shop.catalog.update('P1', {'id': 'P2', 'title': 'Clash'})

        assert exc.value.code == 'duplicate_id'
        assert shop.catalog.get('P1').title == 'Shadow Hoodie'
        assert shop.cart.lines[0].product_id == 'P1'
        assert shop.wishlist.ids == ['P1']

    def test_invalid_price_on_update(self, shop):
        with pytest.raises(ValidationError) as exc:
            shop.catalog.update('P1', {'price': 0})
        assert exc.value.code == 'invalid_price'
        assert shop.catalog.get('P1').price == Decimal('200')

    def test_update_keeps_position_and_unlisted_fields(self, shop):
        updated = shop.catalog.update('P2', {'price': '85'})

        assert [p.id for p in shop.catalog.products] == ['P1', 'P2', 'TEE-01']
        assert updated.brand == 'Nocturne'
        assert updated.price == Decimal('85')

    def test_update_ends_edit_session(self, shop):
        shop.catalog.begin_edit('P1')
        shop.catalog.update('P1', {'id': 'P1-NEW'})
        assert shop.catalog.editing_id is None


class TestDelete:
    """Tests for product deletion."""

    def test_delete_removes_lines_and_wishlist(self, shop, reopen):
        shop.cart.add_line(shop.catalog.get('P1'), color='Black')
        shop.cart.add_line(shop.catalog.get('P1'), color='Grey')
        shop.cart.add_line(shop.catalog.get('P2'))
        shop.wishlist.toggle('P1')
        shop.wishlist.toggle('P2')

        assert shop.catalog.delete('P1') is True

        assert shop.catalog.get('P1') is None
        assert [line.product_id for line in shop.cart.lines] == ['P2']
        assert shop.wishlist.ids == ['P2']

        reloaded = reopen(shop)
        assert reloaded.catalog.get('P1') is None
        assert [line.product_id for line in reloaded.cart.lines] == ['P2']
        assert reloaded.wishlist.ids == ['P2']

    def test_delete_absent_is_noop(self, shop):
        shop.cart.add_line(shop.catalog.get('P1'))
        assert shop.catalog.delete('NOPE') is False
        assert len(shop.catalog) == 3
        assert len(shop.cart) == 1

    def test_delete_resets_edit_session(self, shop):
        shop.catalog.begin_edit('TEE-01')
        shop.catalog.delete('TEE-01')
        assert shop.catalog.editing_id is None

    def test_delete_other_product_keeps_edit_session(self, shop):
        shop.catalog.begin_edit('TEE-01')
        shop.catalog.delete('P2')
        assert shop.catalog.editing_id == 'TEE-01'


class TestImportExport:
    """Tests for bulk import and export."""

    def test_export_snapshot_shape(self, shop):
        snapshot = shop.catalog.export_snapshot()

        assert [p['id'] for p in snapshot] == ['P1', 'P2', 'TEE-01']
        assert snapshot[0]['price'] == 200
        assert snapshot[0]['reviewCount'] == 12
        assert snapshot[1]['price'] == 79.9
        assert 'rating' not in snapshot[1]

    def test_bulk_import_appends_without_deduplication(self, shop):
        count = shop.catalog.bulk_import([
            {'id': 'NEW-1', 'title': 'New', 'price': 10, 'image': 'x.jpg'},
            {'id': 'P1', 'title': 'Second P1', 'price': 20, 'image': 'y.jpg'},
            'not a product',
        ])

        assert count == 2
        assert [p.id for p in shop.catalog.products] == ['P1', 'P2', 'TEE-01', 'NEW-1', 'P1']
        assert shop.catalog.get('P1').title == 'Shadow Hoodie'

    def test_import_then_export_round_trip(self, shop, client_state):
        target = CatalogStore(client_state)
        target.load(seed=[])
        target.bulk_import(shop.catalog.export_snapshot())

        assert target.export_snapshot() == shop.catalog.export_snapshot()

    def test_stored_catalog_wins_over_seed(self, shop, reopen):
        shop.catalog.delete('P2')
        reloaded = reopen(shop)
        assert [p.id for p in reloaded.catalog.products] == ['P1', 'TEE-01']

    def test_reset_replaces_catalog_and_clears_cart(self, shop):
        shop.cart.add_line(shop.catalog.get('P1'))
        shop.catalog.reset([{'id': 'ONLY', 'title': 'Only', 'price': 5, 'image': 'o.jpg'}])

        assert [p.id for p in shop.catalog.products] == ['ONLY']
        assert len(shop.cart) == 0

    def test_imported_duplicate_can_still_be_edited_in_place(self, shop):
        shop.catalog.bulk_import([{'id': 'P1', 'title': 'Second P1', 'price': 20, 'image': 'y.jpg'}])

        updated = shop.catalog.update('P1', {'title': 'Shadow Hoodie v2'})

        assert updated.title == 'Shadow Hoodie v2'
        assert [p.title for p in shop.catalog.products if p.id == 'P1'] == ['Shadow Hoodie v2', 'Second P1']

    def test_rename_onto_imported_duplicate_id_is_rejected(self, shop):
        shop.catalog.bulk_import([{'id': 'P1', 'title': 'Second P1', 'price': 20, 'image': 'y.jpg'}])

        with pytest.raises(ValidationError) as exc:
            shop.catalog.update('P2', {'id': 'P1'})
        assert exc.value.code == 'duplicate_id'


class TestEditSession:

    def test_begin_edit_unknown_product(self, shop):
        with pytest.raises(NotFoundError):
            shop.catalog.begin_edit('NOPE')

    def test_cancel_edit(self, shop):
        shop.catalog.begin_edit('P1')
        shop.catalog.cancel_edit()
        assert shop.catalog.editing_id is None


class TestDocumentsUnavailable:
    """A session loaded without documents is not ready and keeps the catalog read-only."""

    DEFAULTS = ShopSettings(shipping_flat=Decimal('45'))

    def open_offline(self, client_id):
        return ShopSession(get_state_store(), client_id, self.DEFAULTS).load(None)

    def test_session_is_not_ready_and_catalog_empty(self, app_context, client_id):
        offline = self.open_offline(client_id)

        assert offline.ready is False
        assert offline.catalog.products == []
        assert offline.catalog.seeded is False

    def test_totals_use_default_settings(self, shop):
        shop.cart.add_line(shop.catalog.get('P2'))

        offline = self.open_offline(shop.client_id)

        totals = offline.totals()
        assert totals.subtotal == Decimal('79.90')
        assert totals.shipping == Decimal('45.00')
        assert totals.total == Decimal('124.90')

    @pytest.mark.parametrize('mutation', [
        lambda catalog: catalog.create(NEW_PRODUCT),
        lambda catalog: catalog.update('P1', {'title': 'x'}),
        lambda catalog: catalog.delete('P1'),
        lambda catalog: catalog.bulk_import([NEW_PRODUCT]),
        lambda catalog: catalog.reset([NEW_PRODUCT]),
    ])
    def test_edits_are_rejected_and_nothing_is_stored(self, app_context, client_id, client_state, mutation):
        offline = self.open_offline(client_id)

        with pytest.raises(DocumentLoadError):
            mutation(offline.catalog)

        assert client_state.load(STORAGE_KEYS['catalog'], None) is None

    def test_document_catalog_returns_after_rejected_edit(self, app_context, client_id, documents):
        offline = self.open_offline(client_id)
        with pytest.raises(DocumentLoadError):
            offline.catalog.create(NEW_PRODUCT)

        back = ShopSession(get_state_store(), client_id, ShopSettings()).load(documents)

        assert [p.id for p in back.catalog.products] == ['P1', 'P2', 'TEE-01']

    def test_stored_catalog_stays_editable(self, shop):
        shop.catalog.delete('P2')

        offline = self.open_offline(shop.client_id)
        offline.catalog.create(NEW_PRODUCT)

        assert offline.ready is False
        assert [p.id for p in offline.catalog.products] == ['P1', 'TEE-01', 'JKT-9']
