"""
Unit tests for the wishlist set and the theme preference.
"""

from storefront.services.state_store import STORAGE_KEYS
from storefront.services.theme_service import ThemePreference
from storefront.services.wishlist_service import WishlistSet


class TestWishlistSet:

    def test_toggle_adds_then_removes(self):
        wishlist = WishlistSet()
        assert wishlist.toggle('P1') is True
        assert 'P1' in wishlist
        assert wishlist.toggle('P1') is False
        assert 'P1' not in wishlist
        assert len(wishlist) == 0

    def test_toggle_persists(self, client_state):
        wishlist = WishlistSet(client_state)
        wishlist.toggle('P1')
        wishlist.toggle('P2')
        wishlist.toggle('P1')

        restored = WishlistSet(client_state)
        restored.load()
        assert restored.ids == ['P2']

    def test_corrupt_entry_loads_empty(self, client_state):
        client_state.save(STORAGE_KEYS['wishlist'], 'P1,P2')
        wishlist = WishlistSet(client_state)
        wishlist.load()
        assert wishlist.ids == []

    def test_load_skips_non_string_and_repeated_ids(self, client_state):
        client_state.save(STORAGE_KEYS['wishlist'], ['P1', 7, None, 'P1', '', 'P2'])
        wishlist = WishlistSet(client_state)
        wishlist.load()
        assert wishlist.ids == ['P1', 'P2']

    def test_rename_onto_stale_member_keeps_single_entry(self, shop):
        shop.wishlist.toggle('P1')
        shop.wishlist.toggle('GONE-9')

        shop.catalog.update('P1', {'id': 'GONE-9'})

        assert shop.wishlist.ids == ['GONE-9']


class TestThemePreference:

    def test_default_theme(self, client_state):
        assert ThemePreference(client_state).load() == ''

    def test_toggle_round_trip(self, client_state):
        theme = ThemePreference(client_state)
        assert theme.toggle() == 'light'
        assert ThemePreference(client_state).load() == 'light'
        assert theme.toggle() == ''
        assert ThemePreference(client_state).load() == ''

    def test_unknown_stored_theme_falls_back(self, client_state):
        client_state.save(STORAGE_KEYS['theme'], 'neon')
        assert ThemePreference(client_state).load() == ''
